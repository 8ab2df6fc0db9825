from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CalculationRequest:
    lat: float
    long: float
    now: datetime


@dataclass(frozen=True)
class Candidate:
    id: str
    lat: float
    long: float
    radius: float = 0.0
