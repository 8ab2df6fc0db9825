"""
Delivery range service.

Responsibilities:
- Rebuild the catalog indexes from the freshest feed snapshot.
- Answer which restaurants can deliver to a coordinate at a given time.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

from .catalog.feed import csv_bytes_to_records
from .catalog.normalizer import records_to_restaurants
from .config import Settings
from .errors import DeliveryRangeError, feed_error
from .indexing.builder import build_indexes
from .indexing.geo_repository import GeoRepository
from .indexing.shards import LAT_PREFIX, LONG_PREFIX, SCHEDULES_PREFIX, ShardReader, ShardWriter
from .matching.models import CalculationRequest
from .matching.pipeline import filter_candidates, find_restaurants_in_radius
from .retrieval import RetrievalOrchestrator, gather_all_or_nothing
from .storage.store import KeyValueStore

logger = logging.getLogger(__name__)


class CatalogFeed(Protocol):
    def fetch_catalog_csv(self) -> bytes: ...


class CalculatorService:
    def __init__(self, settings: Settings, store: KeyValueStore, feed: CatalogFeed) -> None:
        self.settings = settings
        self.store = store
        self.feed = feed
        self.writer = ShardWriter(store, settings.chunk_size, settings.index_ttl_seconds)
        self.orchestrator = RetrievalOrchestrator(ShardReader(store))
        self.geo = GeoRepository(store, settings.index_ttl_seconds)

    async def _fetch_feed(self) -> bytes:
        try:
            return await asyncio.to_thread(self.feed.fetch_catalog_csv)
        except DeliveryRangeError:
            raise
        except Exception as exc:
            raise feed_error(f"error getting restaurants csv: {exc}") from exc

    async def preprocess_restaurants(self) -> int:
        """Rebuild every index from the feed. Returns the number of restaurants indexed."""
        start_time = time.time()
        try:
            records = csv_bytes_to_records(await self._fetch_feed())
            restaurants = records_to_restaurants(records)
            indexes = build_indexes(restaurants)

            if self.settings.index_backend == "geo":
                await self.geo.write_restaurants(restaurants)
                await self.geo.write_schedules(indexes.schedules)
            else:
                await gather_all_or_nothing(
                    self.writer.write_coordinates(indexes.lat_index, LAT_PREFIX),
                    self.writer.write_coordinates(indexes.long_index, LONG_PREFIX),
                )
                await self.writer.write_schedules(indexes.schedules, SCHEDULES_PREFIX)
        except DeliveryRangeError as exc:
            logger.error("preprocess_restaurants failed (%s): %s", exc.kind.value, exc.message)
            raise

        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        logger.info(
            "Finished preprocessing %d restaurant(s) with %s backend in %.1f ms",
            len(restaurants),
            self.settings.index_backend,
            elapsed_ms,
        )
        return len(restaurants)

    async def calculate_delivery_range(self, request: CalculationRequest) -> list[str]:
        try:
            if self.settings.index_backend == "geo":
                return await self._calculate_with_geo(request)
            indexes = await self.orchestrator.fetch_indexes()
        except DeliveryRangeError as exc:
            logger.error("calculate_delivery_range failed (%s): %s", exc.kind.value, exc.message)
            raise

        return find_restaurants_in_radius(
            request,
            indexes.lat_index,
            indexes.long_index,
            indexes.schedules,
            self.settings.max_search_radius_km,
        )

    async def _calculate_with_geo(self, request: CalculationRequest) -> list[str]:
        candidates, schedules = await gather_all_or_nothing(
            self.geo.find_in_radius(request.lat, request.long, self.settings.max_search_radius_km),
            self.geo.read_schedules(),
        )
        return filter_candidates(request, candidates, schedules)
