"""Error types raised by key management and request signing.

Every error carries a stable ``code`` so callers (and the CLI) can report
failures without matching on message text.
"""
from __future__ import annotations


class CdsError(Exception):
    code = "cds_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class KeyLoadError(CdsError):
    code = "key_load_error"


class MissingFieldError(KeyLoadError):
    code = "missing_field"

    def __init__(self, fields: list[str]):
        super().__init__("Missing required fields: " + ", ".join(fields))
        self.fields = list(fields)


class InvalidKeyLengthError(KeyLoadError):
    code = "invalid_key_length"

    def __init__(self, length: int, expected: int = 32):
        super().__init__(f"Private key must be {expected} bytes (ed25519), got {length}")
        self.length = length
        self.expected = expected


class InvalidKeyError(KeyLoadError):
    code = "invalid_key"


class KeyNotFoundError(CdsError):
    code = "key_not_found"

    def __init__(self, key_id: str):
        super().__init__(f"Key not found: {key_id}")
        self.key_id = key_id


class NoKeyLoadedError(CdsError):
    code = "no_key_loaded"

    def __init__(self, message: str = "No signing key loaded. Load a signing key first."):
        super().__init__(message)


class SigningFailureError(CdsError):
    code = "signing_failure"


__all__ = [
    "CdsError",
    "KeyLoadError",
    "MissingFieldError",
    "InvalidKeyLengthError",
    "InvalidKeyError",
    "KeyNotFoundError",
    "NoKeyLoadedError",
    "SigningFailureError",
]
