"""Beckn HTTP request signing (BLAKE2b-512 digest + Ed25519, "xed25519").

Header format:
  Digest: BLAKE-512=<b64(blake2b_512(body))>
  Authorization: Signature keyId="<subscriber>|<key>|xed25519" algorithm="xed25519"
      created="<unix>" expires="<unix+600>" headers="(created) (expires) digest" signature="<b64(sig)>"

Canonical message (UTF-8, no trailing newline):
  "(created): <created>\n" +
  "(expires): <expires>\n" +
  "digest: BLAKE-512=<b64>"

The raw canonical bytes are signed; no prehash is applied before Ed25519.
Authorization parameters are space separated, not comma separated.
"""
from __future__ import annotations

import logging
import re
import time
from base64 import b64decode, b64encode
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from .constants import (
    AUTHORIZATION_HEADER,
    DIGEST_HEADER,
    SIGNATURE_ALGORITHM,
    SIGNATURE_VALIDITY_SECONDS,
    SIGNED_HEADERS,
)
from .crypto.blake2b_hash import blake2b_512, digest_header_value
from .errors import NoKeyLoadedError, SigningFailureError
from .security.keystore import KeyStore, SigningIdentity

_log = logging.getLogger(__name__)

_AUTH_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')


def _b64(b: bytes) -> str:
    return b64encode(b).decode("ascii")


def build_signing_string(created: int, expires: int, digest: str) -> str:
    return f"(created): {created}\n(expires): {expires}\ndigest: {digest}"


def composite_key_id(identity: SigningIdentity) -> str:
    return f"{identity.subscriber_id}|{identity.key_id}|{SIGNATURE_ALGORITHM}"


def sign_string(identity: Optional[SigningIdentity], signing_string: str) -> str:
    """Ed25519 detached signature over the raw UTF-8 signing string, base64 encoded."""
    if identity is None:
        raise NoKeyLoadedError()
    message = signing_string.encode("utf-8")
    try:
        sig = identity.private_key().sign(message)
    except (ValueError, TypeError) as e:
        raise SigningFailureError(f"ed25519 signing failed: {e}") from e
    return _b64(sig)


@dataclass(frozen=True)
class SignedHeaders:
    digest: str
    authorization: str

    def as_headers(self) -> Dict[str, str]:
        return {DIGEST_HEADER: self.digest, AUTHORIZATION_HEADER: self.authorization}


def compose_headers(
    identity: Optional[SigningIdentity],
    created: int,
    expires: int,
    digest: str,
    signature_b64: str,
) -> SignedHeaders:
    if identity is None:
        raise NoKeyLoadedError()
    authorization = (
        f'Signature keyId="{composite_key_id(identity)}" '
        f'algorithm="{SIGNATURE_ALGORITHM}" '
        f'created="{created}" '
        f'expires="{expires}" '
        f'headers="{SIGNED_HEADERS}" '
        f'signature="{signature_b64}"'
    )
    return SignedHeaders(digest=digest, authorization=authorization)


def sign_request(keystore: KeyStore, body: Union[str, bytes], *, created: Optional[int] = None) -> SignedHeaders:
    """Sign a serialized request body with the keystore's current identity.

    Raises NoKeyLoadedError when nothing is current and SigningFailureError
    when the crypto layer fails. The keystore is never modified.
    """
    identity = keystore.current_identity()
    if created is None:
        created = int(time.time())
    expires = created + SIGNATURE_VALIDITY_SECONDS

    digest = digest_header_value(body)
    signing_string = build_signing_string(created, expires, digest)
    signature = sign_string(identity, signing_string)
    headers = compose_headers(identity, created, expires, digest, signature)

    if _log.isEnabledFor(logging.DEBUG):
        prehash = _b64(blake2b_512(signing_string.encode("utf-8")))
        _log.debug(
            "Signed request (xed25519): key_id=%s created=%s expires=%s digest=%s... prehash=%s... signature=%s...",
            composite_key_id(identity),
            created,
            expires,
            digest[:50],
            prehash[:50],
            signature[:50],
        )
    return headers


def parse_authorization(header: str) -> Dict[str, str]:
    """Parse a 'Signature k="v" k="v"' header into a dict."""
    header = (header or "").strip()
    if not header.startswith("Signature "):
        raise ValueError("authorization is not a Signature header")
    return dict(_AUTH_PARAM_RE.findall(header[len("Signature "):]))


def _public_key(public_key: Union[Ed25519PublicKey, bytes, str]) -> Ed25519PublicKey:
    if isinstance(public_key, Ed25519PublicKey):
        return public_key
    if isinstance(public_key, str):
        public_key = b64decode(public_key)
    return Ed25519PublicKey.from_public_bytes(public_key)


def verify_signature(
    public_key: Union[Ed25519PublicKey, bytes, str], signing_string: str, signature_b64: str
) -> bool:
    try:
        _public_key(public_key).verify(b64decode(signature_b64), signing_string.encode("utf-8"))
    except (InvalidSignature, ValueError):
        return False
    return True


def verify_request(
    body: Union[str, bytes],
    headers: Mapping[str, str],
    public_key: Union[Ed25519PublicKey, bytes, str],
    *,
    now: Optional[int] = None,
    enforce_expiry: bool = False,
) -> Dict[str, Any]:
    """Check Digest and Authorization headers of a signed request.

    Mirrors what the verifying registry does; raises ValueError on any mismatch.
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    digest = lowered.get(DIGEST_HEADER.lower())
    auth = lowered.get(AUTHORIZATION_HEADER.lower())
    if not digest or not auth:
        raise ValueError("missing Digest or Authorization header")

    if digest != digest_header_value(body):
        raise ValueError("digest mismatch")

    params = parse_authorization(auth)
    if params.get("algorithm") != SIGNATURE_ALGORITHM:
        raise ValueError("unsupported signature algorithm")
    if params.get("headers") != SIGNED_HEADERS:
        raise ValueError("unexpected signed headers list")
    key_parts = (params.get("keyId") or "").split("|")
    if len(key_parts) != 3 or key_parts[2] != SIGNATURE_ALGORITHM:
        raise ValueError("invalid keyId")
    try:
        created = int(params["created"])
        expires = int(params["expires"])
    except (KeyError, ValueError) as e:
        raise ValueError("invalid created/expires") from e

    if enforce_expiry:
        current = int(time.time()) if now is None else now
        if current > expires:
            raise ValueError("signature expired")

    signing_string = build_signing_string(created, expires, digest)
    if not verify_signature(public_key, signing_string, params.get("signature", "")):
        raise ValueError("bad signature")
    return {
        "ok": True,
        "subscriber_id": key_parts[0],
        "key_id": key_parts[1],
        "created": created,
        "expires": expires,
    }


__all__ = [
    "SignedHeaders",
    "build_signing_string",
    "composite_key_id",
    "sign_string",
    "compose_headers",
    "sign_request",
    "parse_authorization",
    "verify_signature",
    "verify_request",
]
