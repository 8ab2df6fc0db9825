from __future__ import annotations

from typing import Iterable

from ..geo import haversine_km
from .models import Candidate


def find_restaurants_within_delivery_radius(
    candidates: Iterable[Candidate], lat: float, long: float
) -> list[str]:
    return [
        c.id
        for c in candidates
        if haversine_km(lat, long, c.lat, c.long) <= c.radius
    ]
