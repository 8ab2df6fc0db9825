from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable

from ..indexing.models import EligibilityMap
from .models import Candidate


def to_hhmm(now: datetime) -> int:
    return now.hour * 100 + now.minute


def is_open(open_hhmm: int, close_hhmm: int, now_hhmm: int) -> bool:
    if open_hhmm <= close_hhmm:
        return open_hhmm <= now_hhmm < close_hhmm
    # Window crosses midnight, e.g. 2200-0600.
    return now_hhmm >= open_hhmm or now_hhmm < close_hhmm


def find_open_restaurants(
    candidates: Iterable[Candidate], schedules: EligibilityMap, now: datetime
) -> list[Candidate]:
    """Keep candidates open at ``now``; their radius becomes the schedule radius."""
    now_hhmm = to_hhmm(now)
    open_candidates = []
    for candidate in candidates:
        schedule = schedules.get(candidate.id)
        if schedule is None:
            continue
        if is_open(schedule.open, schedule.close, now_hhmm):
            open_candidates.append(replace(candidate, radius=schedule.radius))
    return open_candidates
