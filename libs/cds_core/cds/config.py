"""CDS client configuration read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_BAP_ID,
    DEFAULT_BAP_URI,
    DEFAULT_BASE_URL,
    DEFAULT_BPP_ID,
    DEFAULT_BPP_URI,
    DEFAULT_TIMEOUT,
    ENV_ALLOW_UNSIGNED,
    ENV_API_KEY,
    ENV_BAP_ID,
    ENV_BAP_URI,
    ENV_BASE_URL,
    ENV_BPP_ID,
    ENV_BPP_URI,
    ENV_TIMEOUT,
)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class CdsConfig:
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    allow_unsigned: bool = False
    timeout: float = DEFAULT_TIMEOUT
    bap_id: str = DEFAULT_BAP_ID
    bap_uri: str = DEFAULT_BAP_URI
    bpp_id: str = DEFAULT_BPP_ID
    bpp_uri: str = DEFAULT_BPP_URI


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_config() -> CdsConfig:
    return CdsConfig(
        base_url=(os.getenv(ENV_BASE_URL) or "").strip() or DEFAULT_BASE_URL,
        api_key=(os.getenv(ENV_API_KEY) or "").strip() or None,
        allow_unsigned=(os.getenv(ENV_ALLOW_UNSIGNED) or "").strip().lower() in _TRUTHY,
        timeout=_env_float(ENV_TIMEOUT, DEFAULT_TIMEOUT),
        bap_id=os.getenv(ENV_BAP_ID, DEFAULT_BAP_ID),
        bap_uri=os.getenv(ENV_BAP_URI, DEFAULT_BAP_URI),
        bpp_id=os.getenv(ENV_BPP_ID, DEFAULT_BPP_ID),
        bpp_uri=os.getenv(ENV_BPP_URI, DEFAULT_BPP_URI),
    )


__all__ = ["CdsConfig", "load_config"]
