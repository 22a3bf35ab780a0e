"""Beckn protocol context ("envelope header") for outbound CDS calls.

A discover context carries the requester (BAP) identity and the schema
contexts the caller is interested in; every other action carries the
responder (BPP) identity and no schema context.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from .constants import (
    ACTION_DISCOVER,
    BECKN_DRIVER_CONTEXT,
    DEFAULT_BAP_ID,
    DEFAULT_BAP_URI,
    DEFAULT_BPP_ID,
    DEFAULT_BPP_URI,
    DEFAULT_TTL,
    DRIVER_CONTEXT,
    JOB_CONTEXT,
    PROTOCOL_VERSION,
    ROLE_DRIVER,
    ROLE_PROVIDER,
)


def schema_context_for_role(role: Optional[str]) -> Tuple[str, ...]:
    if role == ROLE_PROVIDER:
        return (BECKN_DRIVER_CONTEXT,)
    if role == ROLE_DRIVER:
        return (JOB_CONTEXT,)
    return (BECKN_DRIVER_CONTEXT, DRIVER_CONTEXT, JOB_CONTEXT)


def iso_timestamp(now: Optional[datetime] = None) -> str:
    ts = now or datetime.now(timezone.utc)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_message_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class _BaseContext:
    action: str
    timestamp: str = field(default_factory=iso_timestamp)
    message_id: str = field(default_factory=new_message_id)
    transaction_id: str = field(default_factory=new_message_id)
    version: str = PROTOCOL_VERSION
    ttl: str = DEFAULT_TTL

    def _common(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "action": self.action,
            "timestamp": self.timestamp,
            "message_id": self.message_id,
            "transaction_id": self.transaction_id,
            "ttl": self.ttl,
        }


@dataclass(frozen=True)
class DiscoverContext(_BaseContext):
    role: Optional[str] = None
    bap_id: str = DEFAULT_BAP_ID
    bap_uri: str = DEFAULT_BAP_URI
    schema_context: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.schema_context:
            object.__setattr__(self, "schema_context", schema_context_for_role(self.role))

    def to_dict(self) -> Dict[str, Any]:
        d = self._common()
        d.update(
            {
                "bap_id": self.bap_id,
                "bap_uri": self.bap_uri,
                "schema_context": list(self.schema_context),
            }
        )
        return d


@dataclass(frozen=True)
class PublishContext(_BaseContext):
    bpp_id: str = DEFAULT_BPP_ID
    bpp_uri: str = DEFAULT_BPP_URI

    def to_dict(self) -> Dict[str, Any]:
        d = self._common()
        d.update({"bpp_id": self.bpp_id, "bpp_uri": self.bpp_uri})
        return d


ProtocolContext = Union[DiscoverContext, PublishContext]


def build_context(
    action: str,
    role: Optional[str] = None,
    *,
    bap_id: str = DEFAULT_BAP_ID,
    bap_uri: str = DEFAULT_BAP_URI,
    bpp_id: str = DEFAULT_BPP_ID,
    bpp_uri: str = DEFAULT_BPP_URI,
    now: Optional[datetime] = None,
) -> ProtocolContext:
    ts = iso_timestamp(now)
    if action == ACTION_DISCOVER:
        return DiscoverContext(
            action=action,
            timestamp=ts,
            role=role,
            bap_id=bap_id,
            bap_uri=bap_uri,
            schema_context=schema_context_for_role(role),
        )
    return PublishContext(action=action, timestamp=ts, bpp_id=bpp_id, bpp_uri=bpp_uri)


__all__ = [
    "DiscoverContext",
    "PublishContext",
    "ProtocolContext",
    "build_context",
    "schema_context_for_role",
    "iso_timestamp",
    "new_message_id",
]
