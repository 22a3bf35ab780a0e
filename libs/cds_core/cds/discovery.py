from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .constants import ROLE_DRIVER

JOB_LOCATION_PATH = "$['beckn:itemAttributes']['job:jobLocation']['geo']"
DRIVER_LOCATION_PATH = "$['beckn:itemAttributes']['driver:homeLocation']['geo']"


@dataclass
class GeoFilter:
    lat: float
    lon: float
    radius_km: float

    def to_spatial(self, role: Optional[str]) -> Dict[str, Any]:
        return {
            "op": "s_dwithin",
            "targets": JOB_LOCATION_PATH if role == ROLE_DRIVER else DRIVER_LOCATION_PATH,
            "geometry": {"type": "Point", "coordinates": [float(self.lon), float(self.lat)]},
            "distanceMeters": float(self.radius_km) * 1000,
        }


@dataclass
class DiscoverQuery:
    text_search: Optional[str] = None
    jsonpath: Optional[str] = None
    geo: Optional[GeoFilter] = None

    def is_empty(self) -> bool:
        return not ((self.text_search or "").strip() or (self.jsonpath or "").strip() or self.geo)


def build_discover_message(
    text_search: Optional[str] = None,
    jsonpath: Optional[str] = None,
    geo: Optional[GeoFilter] = None,
    role: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the discover ``message`` from whichever criteria are set."""
    message: Dict[str, Any] = {}
    if text_search and text_search.strip():
        message["text_search"] = text_search.strip()
    if jsonpath and jsonpath.strip():
        message["filters"] = {"type": "jsonpath", "expression": jsonpath.strip()}
    if geo is not None:
        message["spatial"] = [geo.to_spatial(role)]
    return message


def extract_items(response: Any) -> List[Any]:
    """Flatten message.catalogs[].beckn:items into a single list."""
    if not isinstance(response, dict):
        return []
    message = response.get("message") or {}
    items: List[Any] = []
    for catalog in message.get("catalogs") or []:
        if isinstance(catalog, dict):
            items.extend(catalog.get("beckn:items") or [])
    return items


__all__ = [
    "GeoFilter",
    "DiscoverQuery",
    "build_discover_message",
    "extract_items",
    "JOB_LOCATION_PATH",
    "DRIVER_LOCATION_PATH",
]
