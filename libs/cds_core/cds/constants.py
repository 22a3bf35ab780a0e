from __future__ import annotations

from typing import Final

# Signed request headers
DIGEST_HEADER: Final[str] = "Digest"
AUTHORIZATION_HEADER: Final[str] = "Authorization"
API_KEY_HEADER: Final[str] = "x-api-key"

DIGEST_PREFIX: Final[str] = "BLAKE-512="
SIGNATURE_ALGORITHM: Final[str] = "xed25519"
KEY_ALGORITHM: Final[str] = "ed25519"
SIGNED_HEADERS: Final[str] = "(created) (expires) digest"
SIGNATURE_VALIDITY_SECONDS: Final[int] = 600
PRIVATE_SEED_LENGTH: Final[int] = 32

# Protocol envelope
PROTOCOL_VERSION: Final[str] = "2.0.0"
DEFAULT_TTL: Final[str] = "PT30S"
ACTION_DISCOVER: Final[str] = "discover"
ACTION_CATALOG_PUBLISH: Final[str] = "catalog_publish"

ROLE_PROVIDER: Final[str] = "provider"
ROLE_DRIVER: Final[str] = "driver"

# Semantic contexts carried by item attributes
BECKN_DRIVER_CONTEXT: Final[str] = (
    "https://raw.githubusercontent.com/beckn/protocol-specifications-new/refs/heads/draft/schema/driver/v1/context.jsonld"
)
DRIVER_CONTEXT: Final[str] = "https://example.org/schema/driver/v1/context.jsonld"
JOB_CONTEXT: Final[str] = "https://example.org/schema/driver-job/v1/context.jsonld"

# Default requester / responder identities
DEFAULT_BAP_ID: Final[str] = "driver-discovery-demo.app"
DEFAULT_BAP_URI: Final[str] = "https://demo.app/callbacks"
DEFAULT_BPP_ID: Final[str] = "driver-provider-demo.app"
DEFAULT_BPP_URI: Final[str] = "https://provider.demo.app/callbacks"

# CDS endpoints
DISCOVER_PATH: Final[str] = "/beckn/discover"
PUBLISH_PATH: Final[str] = "/beckn/v2/catalog/publish"
DEFAULT_BASE_URL: Final[str] = "http://localhost:3100"
DEFAULT_TIMEOUT: Final[float] = 15.0

# Environment variables
ENV_BASE_URL: Final[str] = "CDS_BASE_URL"
ENV_API_KEY: Final[str] = "CDS_API_KEY"
ENV_ALLOW_UNSIGNED: Final[str] = "CDS_ALLOW_UNSIGNED"
ENV_TIMEOUT: Final[str] = "CDS_TIMEOUT"
ENV_BAP_ID: Final[str] = "CDS_BAP_ID"
ENV_BAP_URI: Final[str] = "CDS_BAP_URI"
ENV_BPP_ID: Final[str] = "CDS_BPP_ID"
ENV_BPP_URI: Final[str] = "CDS_BPP_URI"
ENV_SIGNING_KEY_JSON: Final[str] = "CDS_SIGNING_KEY_JSON"  # inline {subscriberId, keyId, privateKey}
ENV_SIGNING_KEY_PATH: Final[str] = "CDS_SIGNING_KEY_PATH"  # filesystem path to the same JSON

__all__ = [
    "DIGEST_HEADER",
    "AUTHORIZATION_HEADER",
    "API_KEY_HEADER",
    "DIGEST_PREFIX",
    "SIGNATURE_ALGORITHM",
    "KEY_ALGORITHM",
    "SIGNED_HEADERS",
    "SIGNATURE_VALIDITY_SECONDS",
    "PRIVATE_SEED_LENGTH",
    "PROTOCOL_VERSION",
    "DEFAULT_TTL",
    "ACTION_DISCOVER",
    "ACTION_CATALOG_PUBLISH",
    "ROLE_PROVIDER",
    "ROLE_DRIVER",
    "BECKN_DRIVER_CONTEXT",
    "DRIVER_CONTEXT",
    "JOB_CONTEXT",
    "DEFAULT_BAP_ID",
    "DEFAULT_BAP_URI",
    "DEFAULT_BPP_ID",
    "DEFAULT_BPP_URI",
    "DISCOVER_PATH",
    "PUBLISH_PATH",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "ENV_BASE_URL",
    "ENV_API_KEY",
    "ENV_ALLOW_UNSIGNED",
    "ENV_TIMEOUT",
    "ENV_BAP_ID",
    "ENV_BAP_URI",
    "ENV_BPP_ID",
    "ENV_BPP_URI",
    "ENV_SIGNING_KEY_JSON",
    "ENV_SIGNING_KEY_PATH",
]
