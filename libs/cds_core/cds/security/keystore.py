# path: libs/cds_core/cds/security/keystore.py
"""Session keystore for CDS request signing.

Key material format (loaded once per session, never persisted by the store):
  {"subscriberId": "...", "keyId": "...", "privateKey": "<base64 of 32-byte ed25519 seed>"}

- keystore_from_env(): CDS_SIGNING_KEY_JSON (inline JSON) or CDS_SIGNING_KEY_PATH (file)

The store is an explicit object handed to whatever signs requests. It does no
locking; concurrent embeddings must serialize mutation and the
read-then-sign sequence themselves.
"""
from __future__ import annotations

import binascii
import json
import logging
import os
from base64 import b64decode, b64encode
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ..constants import (
    ENV_SIGNING_KEY_JSON,
    ENV_SIGNING_KEY_PATH,
    KEY_ALGORITHM,
    PRIVATE_SEED_LENGTH,
)
from ..errors import (
    InvalidKeyError,
    InvalidKeyLengthError,
    KeyNotFoundError,
    MissingFieldError,
    NoKeyLoadedError,
)

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SigningIdentity:
    subscriber_id: str
    key_id: str
    private_seed: bytes = field(repr=False)
    algorithm: str = KEY_ALGORITHM

    def private_key(self) -> Ed25519PrivateKey:
        return Ed25519PrivateKey.from_private_bytes(self.private_seed)

    def public_key_bytes(self) -> bytes:
        return self.private_key().public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    def summary(self) -> Dict[str, str]:
        return {"key_id": self.key_id, "subscriber_id": self.subscriber_id}


def _decode_seed(private_key_b64: str) -> bytes:
    s = "".join(private_key_b64.split())
    s += "=" * ((4 - len(s) % 4) % 4)
    try:
        return b64decode(s, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidKeyError(f"Private key is not valid base64: {e}") from e


class KeyStore:
    """In-memory signing identities keyed by key id, plus the current pointer."""

    def __init__(self) -> None:
        self._keys: Dict[str, SigningIdentity] = {}
        self._current_key_id: Optional[str] = None

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key_id: object) -> bool:
        return key_id in self._keys

    def load_key(self, subscriber_id: str, key_id: str, private_key_b64: str) -> SigningIdentity:
        """Decode, validate and store an identity, making it current.

        Raises MissingFieldError, InvalidKeyError or InvalidKeyLengthError;
        on failure the store is left exactly as it was.
        """
        missing = [
            name
            for name, value in (
                ("subscriberId", subscriber_id),
                ("keyId", key_id),
                ("privateKey", private_key_b64),
            )
            if not value
        ]
        if missing:
            raise MissingFieldError(missing)

        seed = _decode_seed(private_key_b64)
        if len(seed) != PRIVATE_SEED_LENGTH:
            raise InvalidKeyLengthError(len(seed), PRIVATE_SEED_LENGTH)

        identity = SigningIdentity(subscriber_id=subscriber_id, key_id=key_id, private_seed=seed)
        self._keys[key_id] = identity
        self._current_key_id = key_id
        _log.info("Loaded key: %s for subscriber: %s", key_id, subscriber_id)
        return identity

    def load_key_data(self, data: Mapping[str, Any]) -> SigningIdentity:
        """Load from the JSON key material format (camelCase; snake_case also accepted)."""
        return self.load_key(
            data.get("subscriberId") or data.get("subscriber_id") or "",
            data.get("keyId") or data.get("key_id") or "",
            data.get("privateKey") or data.get("private_key") or "",
        )

    def load_key_file(self, path: str) -> SigningIdentity:
        p = os.fspath(path)
        try:
            with open(p, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidKeyError(f"Unable to read key file {p}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidKeyError(f"Key file {p} must contain a JSON object")
        return self.load_key_data(data)

    def list_keys(self) -> List[Dict[str, str]]:
        return [k.summary() for k in self._keys.values()]

    def set_current(self, key_id: str) -> None:
        if key_id not in self._keys:
            _log.error("Key not found: %s", key_id)
            raise KeyNotFoundError(key_id)
        self._current_key_id = key_id
        _log.info("Switched to key: %s", key_id)

    def get_current(self) -> Optional[Dict[str, str]]:
        identity = self._keys.get(self._current_key_id) if self._current_key_id else None
        return identity.summary() if identity else None

    def current_identity(self) -> SigningIdentity:
        if self._current_key_id is None or self._current_key_id not in self._keys:
            raise NoKeyLoadedError()
        return self._keys[self._current_key_id]

    def public_key_b64(self, key_id: Optional[str] = None) -> str:
        """Base64 of the raw Ed25519 public key for key_id (default: current)."""
        if key_id is None:
            identity = self.current_identity()
        elif key_id in self._keys:
            identity = self._keys[key_id]
        else:
            raise KeyNotFoundError(key_id)
        return b64encode(identity.public_key_bytes()).decode("ascii")

    def clear(self) -> None:
        self._keys = {}
        self._current_key_id = None
        _log.info("All keys cleared")


def keystore_from_env() -> KeyStore:
    """Build a keystore seeded from CDS_SIGNING_KEY_JSON or CDS_SIGNING_KEY_PATH.

    Returns an empty store when neither is set. Malformed material raises
    the same KeyLoadError subclasses as KeyStore.load_key.
    """
    ks = KeyStore()
    js = (os.getenv(ENV_SIGNING_KEY_JSON) or "").strip()
    if js:
        try:
            data = json.loads(js)
        except json.JSONDecodeError as e:
            raise InvalidKeyError(f"{ENV_SIGNING_KEY_JSON} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise InvalidKeyError(f"{ENV_SIGNING_KEY_JSON} must be a JSON object")
        ks.load_key_data(data)
        return ks

    path = (os.getenv(ENV_SIGNING_KEY_PATH) or "").strip()
    if path:
        ks.load_key_file(path)
    return ks


__all__ = ["SigningIdentity", "KeyStore", "keystore_from_env"]
