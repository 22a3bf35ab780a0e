# path: libs/cds_core/cds/__init__.py
"""
CDS core package.

Exports the session keystore, BLAKE2b-512 digest and xed25519 request signing,
Beckn context building, role-based response filtering, and the CDS HTTP client.
"""
from .security.keystore import KeyStore, SigningIdentity, keystore_from_env
from .crypto.blake2b_hash import compute_digest, digest_header_value
from .http_sig import (
    SignedHeaders,
    build_signing_string,
    composite_key_id,
    compose_headers,
    sign_string,
    sign_request,
    parse_authorization,
    verify_signature,
    verify_request,
)
from .context import DiscoverContext, PublishContext, build_context, schema_context_for_role
from .response_filter import allowed_contexts_for_role, filter_response
from .discovery import DiscoverQuery, GeoFilter, build_discover_message, extract_items
from .client import CdsHttpClient, CdsResult
from .config import CdsConfig, load_config
from .errors import (
    CdsError,
    KeyLoadError,
    MissingFieldError,
    InvalidKeyLengthError,
    InvalidKeyError,
    KeyNotFoundError,
    NoKeyLoadedError,
    SigningFailureError,
)

__all__ = [
    "KeyStore",
    "SigningIdentity",
    "keystore_from_env",
    "compute_digest",
    "digest_header_value",
    "SignedHeaders",
    "build_signing_string",
    "composite_key_id",
    "compose_headers",
    "sign_string",
    "sign_request",
    "parse_authorization",
    "verify_signature",
    "verify_request",
    "DiscoverContext",
    "PublishContext",
    "build_context",
    "schema_context_for_role",
    "allowed_contexts_for_role",
    "filter_response",
    "DiscoverQuery",
    "GeoFilter",
    "build_discover_message",
    "extract_items",
    "CdsHttpClient",
    "CdsResult",
    "CdsConfig",
    "load_config",
    "CdsError",
    "KeyLoadError",
    "MissingFieldError",
    "InvalidKeyLengthError",
    "InvalidKeyError",
    "KeyNotFoundError",
    "NoKeyLoadedError",
    "SigningFailureError",
]
