from __future__ import annotations

from ..indexing.models import CoordinateIndex, EligibilityMap
from .distance import find_restaurants_within_delivery_radius
from .models import CalculationRequest, Candidate
from .spatial import find_restaurants_in_square_area
from .temporal import find_open_restaurants


def filter_candidates(
    request: CalculationRequest, candidates: list[Candidate], schedules: EligibilityMap
) -> list[str]:
    """Temporal then distance stage, shared by both index layouts."""
    if not candidates:
        return []
    open_candidates = find_open_restaurants(candidates, schedules, request.now)
    return find_restaurants_within_delivery_radius(open_candidates, request.lat, request.long)


def find_restaurants_in_radius(
    request: CalculationRequest,
    lat_index: CoordinateIndex,
    long_index: CoordinateIndex,
    schedules: EligibilityMap,
    max_search_radius_km: float,
) -> list[str]:
    candidates = find_restaurants_in_square_area(
        lat_index, long_index, request.lat, request.long, max_search_radius_km
    )
    return filter_candidates(request, candidates, schedules)
