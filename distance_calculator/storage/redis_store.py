from __future__ import annotations

import logging

import redis

from ..errors import invalid_query_error, not_found_error, store_error
from .store import INVALID_COORDINATES_FRAGMENT, geo_member_name

logger = logging.getLogger(__name__)


def _translate(operation: str, exc: redis.RedisError) -> Exception:
    message = str(exc)
    if isinstance(exc, redis.ResponseError) and INVALID_COORDINATES_FRAGMENT in message:
        return invalid_query_error(message)
    logger.error("Redis %s failed: %s", operation, message)
    return store_error(f"redis {operation}: {message}")


class RedisStore:
    """KeyValueStore backed by a Redis server (GEOSEARCH needs Redis >= 6.2)."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def set(self, key: str, value: str, ttl_seconds: float) -> None:
        ex = int(ttl_seconds) if ttl_seconds and ttl_seconds > 0 else None
        try:
            self.client.set(key, value, ex=ex)
        except redis.RedisError as exc:
            raise _translate("set " + key, exc) from exc

    def get(self, key: str) -> str:
        try:
            value = self.client.get(key)
        except redis.RedisError as exc:
            raise _translate("get " + key, exc) from exc
        if value is None:
            raise not_found_error(f"key {key!r} not found")
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as exc:
            raise _translate("delete " + key, exc) from exc

    def geo_add(
        self, key: str, member_id: str, lat: float, long: float, radius: float, ttl_seconds: float = 0
    ) -> None:
        name = geo_member_name(member_id, lat, long, radius)
        try:
            self.client.geoadd(key, [long, lat, name])
            if ttl_seconds and ttl_seconds > 0:
                self.client.expire(key, int(ttl_seconds))
        except redis.RedisError as exc:
            raise _translate("geoadd " + key, exc) from exc

    def geo_search(self, key: str, lat: float, long: float, radius_km: float) -> list[str]:
        try:
            members = self.client.geosearch(
                key, longitude=long, latitude=lat, radius=radius_km, unit="km", sort="ASC"
            )
        except redis.RedisError as exc:
            raise _translate("geosearch " + key, exc) from exc
        return [m.decode("utf-8") if isinstance(m, bytes) else m for m in members]
