from __future__ import annotations

from typing import Sequence

import pandas as pd

from ..catalog.models import Restaurant
from .models import CatalogIndexes, CoordinateIndex, EligibilityMap, EligibilitySchedule


def _to_frame(restaurants: Sequence[Restaurant]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "id": [r.id for r in restaurants],
            "lat": pd.Series([r.lat for r in restaurants], dtype="float64"),
            "long": pd.Series([r.long for r in restaurants], dtype="float64"),
        }
    )


def build_coordinate_index(frame: pd.DataFrame, column: str) -> CoordinateIndex:
    """Sort one axis ascending. mergesort keeps input order among equal coordinates."""
    ordered = frame.sort_values(column, kind="mergesort")
    return CoordinateIndex(ordered[column].to_numpy(dtype="float64"), ordered["id"].tolist())


def build_eligibility_map(restaurants: Sequence[Restaurant]) -> EligibilityMap:
    return {
        r.id: EligibilitySchedule(open=r.open, close=r.close, radius=r.radius)
        for r in restaurants
    }


def build_indexes(restaurants: Sequence[Restaurant]) -> CatalogIndexes:
    frame = _to_frame(restaurants)
    return CatalogIndexes(
        lat_index=build_coordinate_index(frame, "lat"),
        long_index=build_coordinate_index(frame, "long"),
        schedules=build_eligibility_map(restaurants),
    )
