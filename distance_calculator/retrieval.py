"""
Concurrent retrieval of the indexes a query needs.

All fetches run to completion; if any failed, the first failure (in fetch
order) is raised and every partial result is dropped. Siblings of a failed
fetch are not cancelled.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable

from .indexing.models import CatalogIndexes
from .indexing.shards import LAT_PREFIX, LONG_PREFIX, SCHEDULES_PREFIX, ShardReader


async def gather_all_or_nothing(*fetches: Awaitable[Any]) -> list[Any]:
    results = await asyncio.gather(*fetches, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


class RetrievalOrchestrator:
    def __init__(self, reader: ShardReader) -> None:
        self.reader = reader

    async def fetch_indexes(self) -> CatalogIndexes:
        lat_index, long_index, schedules = await gather_all_or_nothing(
            self.reader.read_coordinates(LAT_PREFIX),
            self.reader.read_coordinates(LONG_PREFIX),
            self.reader.read_schedules(SCHEDULES_PREFIX),
        )
        return CatalogIndexes(lat_index=lat_index, long_index=long_index, schedules=schedules)
