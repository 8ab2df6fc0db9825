from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Restaurant:
    id: str
    lat: float
    long: float
    radius: float
    open: int  # HHMM, e.g. 2130 for 21:30
    close: int
    rating: float
