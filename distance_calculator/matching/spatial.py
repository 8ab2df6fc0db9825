"""Bounding-box prefilter over the sorted per-axis coordinate indexes."""
from __future__ import annotations

import numpy as np

from ..geo import km_to_degrees
from ..indexing.models import CoordinateIndex
from .models import Candidate


def lower_index_bound(coordinates: np.ndarray, lower_value: float) -> int:
    """First index whose coordinate is >= ``lower_value``."""
    return int(np.searchsorted(coordinates, lower_value, side="left"))


def upper_index_bound(coordinates: np.ndarray, upper_value: float) -> int:
    """First index whose coordinate is > ``upper_value``."""
    return int(np.searchsorted(coordinates, upper_value, side="right"))


def find_index_range(
    index: CoordinateIndex, target: float, km_distance: float
) -> tuple[int, int] | None:
    """Return ``(lower, upper)`` covering coordinates in ``[target - d, target + d]``.

    ``d`` is ``km_distance`` converted to degrees. ``None`` when nothing falls
    inside the window.
    """
    delta = km_to_degrees(km_distance)
    lower = lower_index_bound(index.coordinates, target - delta)
    upper = upper_index_bound(index.coordinates, target + delta)
    if lower < 0 or upper > len(index) or lower >= upper:
        return None
    return lower, upper


def remove_outside_range(index: CoordinateIndex, target: float, km_distance: float) -> CoordinateIndex:
    bounds = find_index_range(index, target, km_distance)
    if bounds is None:
        return CoordinateIndex.empty()
    return index.slice(*bounds)


def find_restaurants_in_square_area(
    lat_index: CoordinateIndex,
    long_index: CoordinateIndex,
    lat: float,
    long: float,
    max_search_radius_km: float,
) -> list[Candidate]:
    possible_lat = remove_outside_range(lat_index, lat, max_search_radius_km)
    if not len(possible_lat):
        return []
    possible_long = remove_outside_range(long_index, long, max_search_radius_km)
    if not len(possible_long):
        return []

    # Built once here and only read below.
    lat_by_id = dict(zip(possible_lat.ids, possible_lat.coordinates.tolist()))

    return [
        Candidate(id=restaurant_id, lat=lat_by_id[restaurant_id], long=coordinate)
        for restaurant_id, coordinate in zip(possible_long.ids, possible_long.coordinates.tolist())
        if restaurant_id in lat_by_id
    ]
