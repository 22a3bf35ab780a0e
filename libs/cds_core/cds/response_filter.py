"""
Role-based filtering of CDS discover responses.

An item is kept only when its attributes declare a semantic context
(``beckn:itemAttributes.@context``, string or list) that is allowed for the
caller's role. Items without a context are always dropped.

Shapes handled, each only if present:
- bare list of items (returned directly, nothing else is inspected)
- message.catalogs[].beckn:items (catalogs emptied by filtering are dropped)
- message.items[]
- message.results[].beckn:items (results emptied by filtering are dropped)

The caller's response is never mutated; filtering works on a deep copy.
"""
from __future__ import annotations

import copy
from typing import Any, FrozenSet, Iterable, List, Optional

from .constants import BECKN_DRIVER_CONTEXT, DRIVER_CONTEXT, JOB_CONTEXT, ROLE_DRIVER, ROLE_PROVIDER

ITEMS_KEYS = ("beckn:items", "items")
ATTRIBUTES_KEYS = ("beckn:itemAttributes", "itemAttributes")


def allowed_contexts_for_role(role: Optional[str]) -> FrozenSet[str]:
    if role == ROLE_PROVIDER:
        return frozenset({BECKN_DRIVER_CONTEXT, DRIVER_CONTEXT})
    if role == ROLE_DRIVER:
        return frozenset({JOB_CONTEXT})
    return frozenset({BECKN_DRIVER_CONTEXT, DRIVER_CONTEXT, JOB_CONTEXT})


def item_contexts(item: Any) -> List[str]:
    if not isinstance(item, dict):
        return []
    for key in ATTRIBUTES_KEYS:
        attrs = item.get(key)
        if isinstance(attrs, dict) and "@context" in attrs:
            ctx = attrs["@context"]
            if isinstance(ctx, str):
                return [ctx]
            if isinstance(ctx, list):
                return [c for c in ctx if isinstance(c, str)]
            return []
    return []


def _filter_items(items: Iterable[Any], allowed: FrozenSet[str]) -> List[Any]:
    return [it for it in items if any(c in allowed for c in item_contexts(it))]


def _items_key(entry: Any) -> Optional[str]:
    if isinstance(entry, dict):
        for key in ITEMS_KEYS:
            if isinstance(entry.get(key), list):
                return key
    return None


def _filter_containers(entries: List[Any], allowed: FrozenSet[str]) -> List[Any]:
    # Entries that never had an item array pass through untouched.
    out = []
    for entry in entries:
        key = _items_key(entry)
        if key is None:
            out.append(entry)
            continue
        kept = _filter_items(entry[key], allowed)
        if kept:
            entry[key] = kept
            out.append(entry)
    return out


def filter_response(response: Any, role: Optional[str]) -> Any:
    allowed = allowed_contexts_for_role(role)
    result = copy.deepcopy(response)

    if isinstance(result, list):
        return _filter_items(result, allowed)
    if not isinstance(result, dict):
        return result

    message = result.get("message")
    if not isinstance(message, dict):
        return result

    if isinstance(message.get("catalogs"), list):
        message["catalogs"] = _filter_containers(message["catalogs"], allowed)
    if isinstance(message.get("items"), list):
        message["items"] = _filter_items(message["items"], allowed)
    if isinstance(message.get("results"), list):
        message["results"] = _filter_containers(message["results"], allowed)
    return result


__all__ = ["allowed_contexts_for_role", "item_contexts", "filter_response"]
