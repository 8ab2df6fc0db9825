from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

DEFAULT_FEED_URL = "https://s3.amazonaws.com/test.jampp.com/dmarasca/takehome.csv"
INDEX_BACKENDS = ("sharded", "geo")


@dataclass(frozen=True)
class Settings:
    project_name: str = "distance-calculator-api"
    version: str = "0.0.1"
    prefix: str = "/distance-calculator-api"
    env: str = "prod"
    log_level: str = "INFO"

    feed_url: str = DEFAULT_FEED_URL
    feed_timeout: float = 30.0

    chunk_size: int = 100_000
    max_search_radius_km: float = 8.0
    index_ttl_seconds: int = 12 * 3600 + 30 * 60
    index_backend: str = "sharded"
    max_value_bytes: int = 0  # 0 disables the store's value size check
    redis_url: str = ""  # empty keeps the in-process store

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if self.index_backend not in INDEX_BACKENDS:
            raise ValueError(
                f"index_backend must be one of {INDEX_BACKENDS}, got {self.index_backend!r}"
            )


def load_settings() -> Settings:
    """Build Settings from the environment. Call once at process start."""
    defaults = Settings()
    return Settings(
        project_name=os.getenv("PROJECT_NAME", defaults.project_name),
        version=os.getenv("PROJECT_VERSION", defaults.version),
        prefix=os.getenv("PREFIX", defaults.prefix),
        env=os.getenv("ENV", defaults.env),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        feed_url=os.getenv("FEED_URL", defaults.feed_url),
        feed_timeout=float(os.getenv("FEED_TIMEOUT", defaults.feed_timeout)),
        chunk_size=int(os.getenv("CHUNK_SIZE", defaults.chunk_size)),
        max_search_radius_km=float(
            os.getenv("MAX_SEARCH_RADIUS_KM", defaults.max_search_radius_km)
        ),
        index_ttl_seconds=int(os.getenv("INDEX_TTL_SECONDS", defaults.index_ttl_seconds)),
        index_backend=os.getenv("INDEX_BACKEND", defaults.index_backend).strip().lower(),
        max_value_bytes=int(os.getenv("MAX_VALUE_BYTES", defaults.max_value_bytes)),
        redis_url=os.getenv("REDIS_URL", defaults.redis_url),
    )
