"""
CDS Security Module

Session keystore holding the signing identities used for outbound requests.
"""

from .keystore import (
    KeyStore,
    SigningIdentity,
    keystore_from_env,
)

__all__ = [
    "KeyStore",
    "SigningIdentity",
    "keystore_from_env",
]
