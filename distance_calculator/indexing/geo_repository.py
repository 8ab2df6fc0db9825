"""
Native-geo index layout.

Instead of sharded coordinate indexes, every restaurant is added to one
geospatial set in the store and the eligibility map is stored as a single
blob. The store's radius search replaces the spatial filter.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Sequence

from ..catalog.models import Restaurant
from ..errors import DeliveryRangeError, ErrorKind, store_error
from ..matching.models import Candidate
from ..storage.store import GEO_LAT_LIMIT, KeyValueStore, call_store
from .models import EligibilityMap, EligibilitySchedule

logger = logging.getLogger(__name__)

GEODATA_KEY = "restaurants:geodata"
TIME_RADIUS_MAP_KEY = "restaurants:time_radius_map"

_NUMBER = r"-?\d+(?:\.\d+)?"
_MEMBER_RE = re.compile(
    rf"^(?P<id>.+?)-(?P<lat>{_NUMBER})-(?P<long>{_NUMBER})-(?P<radius>{_NUMBER})$"
)


def parse_member(member: str) -> Candidate:
    """Parse a ``<id>-<lat>-<long>-<radius>`` geo member name."""
    match = _MEMBER_RE.match(member)
    if not match:
        raise store_error(f"malformed geo member {member!r}: expected <id>-<lat>-<long>-<radius>")
    return Candidate(
        id=match.group("id"),
        lat=float(match.group("lat")),
        long=float(match.group("long")),
        radius=float(match.group("radius")),
    )


class GeoRepository:
    def __init__(self, store: KeyValueStore, ttl_seconds: float) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds

    async def write_restaurants(self, restaurants: Sequence[Restaurant]) -> None:
        # Members embed their coordinates, so stale members would survive a re-add.
        await call_store("delete " + GEODATA_KEY, self.store.delete, GEODATA_KEY)
        await call_store("geo_add " + GEODATA_KEY, self._add_all, restaurants)
        logger.info("Added %d restaurant(s) to %s", len(restaurants), GEODATA_KEY)

    def _add_all(self, restaurants: Sequence[Restaurant]) -> None:
        for r in restaurants:
            if abs(r.lat) > GEO_LAT_LIMIT:
                logger.warning("Restaurant %s latitude %s is outside the geo index range; skipped", r.id, r.lat)
                continue
            self.store.geo_add(GEODATA_KEY, r.id, r.lat, r.long, r.radius, self.ttl_seconds)

    async def write_schedules(self, schedules: EligibilityMap) -> None:
        payload = json.dumps({rid: schedule.to_dict() for rid, schedule in schedules.items()})
        await call_store(
            "set " + TIME_RADIUS_MAP_KEY,
            self.store.set,
            TIME_RADIUS_MAP_KEY,
            payload,
            self.ttl_seconds,
        )

    async def read_schedules(self) -> EligibilityMap:
        raw = await call_store("get " + TIME_RADIUS_MAP_KEY, self.store.get, TIME_RADIUS_MAP_KEY)
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise store_error(f"corrupt value under {TIME_RADIUS_MAP_KEY!r}: {exc}") from exc
        if not isinstance(data, dict):
            raise store_error(f"corrupt value under {TIME_RADIUS_MAP_KEY!r}: expected an object of schedules")
        try:
            return {rid: EligibilitySchedule.from_dict(item) for rid, item in data.items()}
        except (KeyError, TypeError, ValueError) as exc:
            raise store_error(f"corrupt value under {TIME_RADIUS_MAP_KEY!r}: bad schedule ({exc!r})") from exc

    async def find_in_radius(self, lat: float, long: float, radius_km: float) -> list[Candidate]:
        try:
            members = await call_store(
                "geo_search " + GEODATA_KEY,
                self.store.geo_search,
                GEODATA_KEY,
                lat,
                long,
                radius_km,
            )
        except DeliveryRangeError as exc:
            if exc.kind is ErrorKind.invalid_query:
                logger.info("Geo search rejected coordinates (%s, %s); no matches", lat, long)
                return []
            raise
        return [parse_member(member) for member in members]
