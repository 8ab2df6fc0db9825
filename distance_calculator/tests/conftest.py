from __future__ import annotations

import pytest

from distance_calculator.config import Settings
from distance_calculator.storage.store import InMemoryStore


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def settings() -> Settings:
    return Settings(chunk_size=2, feed_url="http://feed.test/restaurants.csv")
