from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Iterator

import numpy as np


@dataclass(frozen=True)
class CoordinateEntry:
    coordinate: float
    id: str


@dataclass(frozen=True)
class EligibilitySchedule:
    open: int
    close: int
    radius: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EligibilitySchedule:
        return cls(open=int(data["open"]), close=int(data["close"]), radius=float(data["radius"]))


EligibilityMap = dict[str, EligibilitySchedule]


class CoordinateIndex:
    """One axis of the catalog, sorted ascending by coordinate.

    Coordinates live in a float64 array so range bounds can be found with
    ``np.searchsorted``; ``ids[i]`` belongs to ``coordinates[i]``.
    """

    def __init__(self, coordinates: np.ndarray, ids: list[str]) -> None:
        if len(coordinates) != len(ids):
            raise ValueError("coordinates and ids must have the same length")
        self.coordinates = np.asarray(coordinates, dtype=np.float64)
        self.ids = list(ids)

    @classmethod
    def from_entries(cls, entries: Iterable[CoordinateEntry]) -> CoordinateIndex:
        """Build a sorted index from entries in any order (stable on ties)."""
        entries = list(entries)
        coords = np.fromiter((e.coordinate for e in entries), dtype=np.float64, count=len(entries))
        order = np.argsort(coords, kind="stable")
        return cls(coords[order], [entries[i].id for i in order])

    @classmethod
    def empty(cls) -> CoordinateIndex:
        return cls(np.empty(0, dtype=np.float64), [])

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self) -> Iterator[CoordinateEntry]:
        for coordinate, restaurant_id in zip(self.coordinates.tolist(), self.ids):
            yield CoordinateEntry(coordinate=coordinate, id=restaurant_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CoordinateIndex):
            return NotImplemented
        return self.ids == other.ids and np.array_equal(self.coordinates, other.coordinates)

    def entries(self) -> list[CoordinateEntry]:
        return list(self)

    def slice(self, lower: int, upper: int) -> CoordinateIndex:
        return CoordinateIndex(self.coordinates[lower:upper], self.ids[lower:upper])


@dataclass(frozen=True)
class CatalogIndexes:
    lat_index: CoordinateIndex
    long_index: CoordinateIndex
    schedules: EligibilityMap
