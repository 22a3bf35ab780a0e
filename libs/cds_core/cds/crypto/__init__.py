from .blake2b_hash import blake2b_512, compute_digest, digest_header_value

__all__ = ["blake2b_512", "compute_digest", "digest_header_value"]
