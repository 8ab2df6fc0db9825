from __future__ import annotations

import logging
import math
from typing import List, Sequence

from ..errors import DeliveryRangeError, data_error, format_error, row_error
from .models import Restaurant

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS: List[str] = [
    "id",
    "latitude",
    "longitude",
    "availability_radius",
    "open_hour",
    "close_hour",
    "rating",
]

MIN_RECORDS = 2


def time_to_hhmm(raw: str) -> int:
    """Convert a clock string ("9:05", "21:30", "21:30:00") into an HHMM integer."""
    parts = raw.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"invalid clock time {raw!r}")

    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"clock time out of range {raw!r}")
    if len(parts) == 3 and not 0 <= int(parts[2]) <= 59:
        raise ValueError(f"clock time out of range {raw!r}")
    return hour * 100 + minute


def _parse_float(raw: str, field: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError:
        raise ValueError(f"{field} is not a number: {raw!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"{field} is not finite: {raw!r}")
    return value


def check_header(header: Sequence[str]) -> None:
    cleaned = [h.strip() for h in header]
    if cleaned != CANONICAL_COLUMNS:
        raise format_error(
            f"CSV badly formatted: expected header {CANONICAL_COLUMNS}, got {cleaned}"
        )


def parse_restaurant_row(record: Sequence[str]) -> Restaurant:
    if len(record) != len(CANONICAL_COLUMNS):
        raise row_error(f"expected {len(CANONICAL_COLUMNS)} fields, got {len(record)}")

    restaurant_id = record[0].strip()
    if not restaurant_id:
        raise row_error("empty restaurant id")

    try:
        lat = _parse_float(record[1], "latitude")
        long = _parse_float(record[2], "longitude")
        radius = _parse_float(record[3], "availability_radius")
        open_hour = time_to_hhmm(record[4])
        close_hour = time_to_hhmm(record[5])
        rating = _parse_float(record[6], "rating")
    except ValueError as exc:
        raise row_error(str(exc)) from exc

    if not -90.0 <= lat <= 90.0:
        raise row_error(f"latitude out of range: {lat}")
    if not -180.0 <= long <= 180.0:
        raise row_error(f"longitude out of range: {long}")
    if radius < 0:
        raise row_error(f"negative availability_radius: {radius}")

    return Restaurant(
        id=restaurant_id,
        lat=lat,
        long=long,
        radius=radius,
        open=open_hour,
        close=close_hour,
        rating=rating,
    )


def records_to_restaurants(records: Sequence[Sequence[str]]) -> List[Restaurant]:
    """
    Map raw CSV records (header first) into Restaurant entities.

    A bad header is fatal. Bad data rows are logged and skipped, and the
    first occurrence of a repeated id wins.
    """
    if len(records) < MIN_RECORDS:
        raise data_error(f"records len is less than {MIN_RECORDS}")

    check_header(records[0])

    restaurants: List[Restaurant] = []
    seen: set[str] = set()
    for line_no, record in enumerate(records[1:], start=2):
        try:
            restaurant = parse_restaurant_row(record)
        except DeliveryRangeError as exc:
            logger.warning("Skipping catalog row %d: %s", line_no, exc.message)
            continue

        if restaurant.id in seen:
            logger.warning("Skipping catalog row %d: duplicate id %r", line_no, restaurant.id)
            continue
        seen.add(restaurant.id)
        restaurants.append(restaurant)

    if not restaurants:
        raise data_error("no valid restaurant rows in catalog")
    return restaurants
