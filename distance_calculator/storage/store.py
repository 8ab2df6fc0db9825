from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Any, Callable, Protocol, TypeVar

from ..errors import DeliveryRangeError, invalid_query_error, not_found_error, store_error
from ..geo import haversine_km

logger = logging.getLogger(__name__)

T = TypeVar("T")

INVALID_COORDINATES_FRAGMENT = "invalid longitude,latitude pair"
INVALID_COORDINATES_MSG = "ERR " + INVALID_COORDINATES_FRAGMENT

# Limits of the geohash encoding used by Redis-compatible stores.
GEO_LAT_LIMIT = 85.05112878
GEO_LONG_LIMIT = 180.0


class KeyValueStore(Protocol):
    def set(self, key: str, value: str, ttl_seconds: float) -> None: ...

    def get(self, key: str) -> str: ...

    def delete(self, key: str) -> None: ...

    def geo_add(
        self, key: str, member_id: str, lat: float, long: float, radius: float, ttl_seconds: float = 0
    ) -> None: ...

    def geo_search(self, key: str, lat: float, long: float, radius_km: float) -> list[str]: ...


def geo_member_name(member_id: str, lat: float, long: float, radius: float) -> str:
    return f"{member_id}-{lat:f}-{long:f}-{radius:f}"


def _check_geo_pair(lat: float, long: float) -> None:
    if not (-GEO_LAT_LIMIT <= lat <= GEO_LAT_LIMIT and -GEO_LONG_LIMIT <= long <= GEO_LONG_LIMIT):
        raise invalid_query_error(f"{INVALID_COORDINATES_MSG} {long:f},{lat:f}")


class InMemoryStore:
    """Process-local store with per-key expiry.

    Calls arrive from worker threads (``asyncio.to_thread``), so every access
    holds ``_lock``.
    """

    def __init__(self, max_value_bytes: int = 0) -> None:
        self._values: dict[str, dict[str, Any]] = {}
        self._geo: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._max_value_bytes = max_value_bytes
        self._sets = 0
        self._gets = 0

    def _expired(self, entry: dict[str, Any]) -> bool:
        expires_at = entry["expires_at"]
        return expires_at is not None and time.time() >= expires_at

    @staticmethod
    def _expiry(ttl_seconds: float) -> float | None:
        return time.time() + ttl_seconds if ttl_seconds and ttl_seconds > 0 else None

    def set(self, key: str, value: str, ttl_seconds: float) -> None:
        size = len(value.encode("utf-8"))
        if self._max_value_bytes and size > self._max_value_bytes:
            raise store_error(
                f"value for {key!r} is {size} bytes, exceeds limit of {self._max_value_bytes}"
            )
        with self._lock:
            self._values[key] = {"value": value, "expires_at": self._expiry(ttl_seconds)}
            self._sets += 1

    def get(self, key: str) -> str:
        with self._lock:
            self._gets += 1
            entry = self._values.get(key)
            if entry and not self._expired(entry):
                return entry["value"]
            if entry:
                del self._values[key]
        raise not_found_error(f"key {key!r} not found")

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)
            self._geo.pop(key, None)

    def geo_add(
        self, key: str, member_id: str, lat: float, long: float, radius: float, ttl_seconds: float = 0
    ) -> None:
        _check_geo_pair(lat, long)
        name = geo_member_name(member_id, lat, long, radius)
        with self._lock:
            entry = self._geo.get(key)
            if entry is None or self._expired(entry):
                entry = {"members": {}, "expires_at": None}
                self._geo[key] = entry
            entry["members"][name] = (lat, long)
            if ttl_seconds:
                entry["expires_at"] = self._expiry(ttl_seconds)

    def geo_search(self, key: str, lat: float, long: float, radius_km: float) -> list[str]:
        _check_geo_pair(lat, long)
        with self._lock:
            entry = self._geo.get(key)
            if entry is None or self._expired(entry):
                return []
            members = list(entry["members"].items())

        hits = []
        for name, (m_lat, m_long) in members:
            distance = haversine_km(lat, long, m_lat, m_long)
            if distance <= radius_km:
                hits.append((distance, name))
        hits.sort()
        return [name for _, name in hits]

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "keys": len(self._values),
                "geo_keys": len(self._geo),
                "sets": self._sets,
                "gets": self._gets,
            }


async def call_store(operation: str, func: Callable[..., T], *args: Any) -> T:
    """Run a blocking store call on a worker thread.

    Failures that are not already tagged come back as store errors.
    """
    try:
        return await asyncio.to_thread(func, *args)
    except DeliveryRangeError:
        raise
    except Exception as exc:
        logger.error("Store call %s failed: %s", operation, exc)
        raise store_error(f"{operation}: {exc}") from exc
