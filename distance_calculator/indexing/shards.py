"""
Chunked persistence of the catalog indexes.

The store caps value size, so each index is written as fixed-size chunks plus
a manifest listing the chunk keys. Chunks are written first and the manifest
last; readers start from the manifest.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from ..errors import store_error
from ..storage.store import KeyValueStore, call_store
from .models import CoordinateEntry, CoordinateIndex, EligibilityMap, EligibilitySchedule

logger = logging.getLogger(__name__)

LAT_PREFIX = "coordinates:lat"
LONG_PREFIX = "coordinates:long"
SCHEDULES_PREFIX = "restaurants:time_radius_map"
MANIFEST_SUFFIX = "manifest"

AXIS_PREFIXES = {"lat": LAT_PREFIX, "long": LONG_PREFIX}


def chunk_key(prefix: str, number: int) -> str:
    # Zero padding keeps lexicographic manifest order equal to creation order.
    return f"{prefix}:{number:05d}"


def manifest_key(prefix: str) -> str:
    return f"{prefix}:{MANIFEST_SUFFIX}"


def chunk_coordinates(
    index: CoordinateIndex, prefix: str, chunk_size: int
) -> dict[str, list[dict[str, Any]]]:
    entries = index.entries()
    chunks: dict[str, list[dict[str, Any]]] = {}
    for number, start in enumerate(range(0, len(entries), chunk_size)):
        chunks[chunk_key(prefix, number)] = [
            {"coordinate": e.coordinate, "id": e.id} for e in entries[start : start + chunk_size]
        ]
    return chunks


def chunk_schedules(
    schedules: EligibilityMap, prefix: str, chunk_size: int
) -> dict[str, dict[str, dict[str, Any]]]:
    chunks: dict[str, dict[str, dict[str, Any]]] = {}
    items = list(schedules.items())
    for number, start in enumerate(range(0, len(items), chunk_size)):
        chunks[chunk_key(prefix, number)] = {
            restaurant_id: schedule.to_dict()
            for restaurant_id, schedule in items[start : start + chunk_size]
        }
    return chunks


def build_manifest(chunks: dict[str, Any]) -> list[str]:
    return sorted(chunks)


def _decode(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise store_error(f"corrupt value under {key!r}: {exc}") from exc


class ShardWriter:
    def __init__(self, store: KeyValueStore, chunk_size: int, ttl_seconds: float) -> None:
        self.store = store
        self.chunk_size = chunk_size
        self.ttl_seconds = ttl_seconds

    async def write_coordinates(self, index: CoordinateIndex, prefix: str) -> list[str]:
        return await self._write(prefix, chunk_coordinates(index, prefix, self.chunk_size))

    async def write_schedules(self, schedules: EligibilityMap, prefix: str = SCHEDULES_PREFIX) -> list[str]:
        return await self._write(prefix, chunk_schedules(schedules, prefix, self.chunk_size))

    async def _write(self, prefix: str, chunks: dict[str, Any]) -> list[str]:
        await asyncio.gather(
            *(
                call_store("set " + key, self.store.set, key, json.dumps(content), self.ttl_seconds)
                for key, content in chunks.items()
            )
        )
        manifest = build_manifest(chunks)
        await call_store(
            "set " + manifest_key(prefix),
            self.store.set,
            manifest_key(prefix),
            json.dumps(manifest),
            self.ttl_seconds,
        )
        logger.info("Wrote %d chunk(s) under %s", len(manifest), prefix)
        return manifest


class ShardReader:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def read_manifest(self, prefix: str) -> list[str]:
        key = manifest_key(prefix)
        manifest = _decode(key, await call_store("get " + key, self.store.get, key))
        if not isinstance(manifest, list):
            raise store_error(f"manifest {key!r} is not a list")
        return sorted(manifest)

    async def _read_chunks(self, keys: list[str]) -> dict[str, Any]:
        raws = await asyncio.gather(*(call_store("get " + key, self.store.get, key) for key in keys))
        return {key: _decode(key, raw) for key, raw in zip(keys, raws)}

    async def read_coordinates(self, prefix: str) -> CoordinateIndex:
        chunks = await self._read_chunks(await self.read_manifest(prefix))
        entries: list[CoordinateEntry] = []
        for key, chunk in chunks.items():
            if not isinstance(chunk, list):
                raise store_error(f"corrupt value under {key!r}: expected a list of entries")
            try:
                entries.extend(
                    CoordinateEntry(coordinate=float(item["coordinate"]), id=str(item["id"]))
                    for item in chunk
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise store_error(f"corrupt value under {key!r}: bad entry ({exc!r})") from exc
        # Re-sorting makes the result independent of chunk fetch order.
        return CoordinateIndex.from_entries(entries)

    async def read_schedules(self, prefix: str = SCHEDULES_PREFIX) -> EligibilityMap:
        chunks = await self._read_chunks(await self.read_manifest(prefix))
        schedules: EligibilityMap = {}
        for key, chunk in chunks.items():
            if not isinstance(chunk, dict):
                raise store_error(f"corrupt value under {key!r}: expected an object of schedules")
            try:
                for restaurant_id, data in chunk.items():
                    schedules[restaurant_id] = EligibilitySchedule.from_dict(data)
            except (KeyError, TypeError, ValueError) as exc:
                raise store_error(f"corrupt value under {key!r}: bad schedule ({exc!r})") from exc
        return schedules
