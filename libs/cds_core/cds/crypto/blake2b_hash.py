"""BLAKE2b-512 body digest helpers."""
from __future__ import annotations

import hashlib
from base64 import b64encode

from ..constants import DIGEST_PREFIX


def blake2b_512(data: bytes) -> bytes:
    """Return the 64-byte unkeyed BLAKE2b digest for the given data."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("data must be bytes-like")
    return hashlib.blake2b(data, digest_size=64).digest()


def compute_digest(body: str | bytes) -> str:
    """Return standard base64 of BLAKE2b-512 over the UTF-8 body."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return b64encode(blake2b_512(body)).decode("ascii")


def digest_header_value(body: str | bytes) -> str:
    return DIGEST_PREFIX + compute_digest(body)


__all__ = ["blake2b_512", "compute_digest", "digest_header_value"]
