import asyncio
from unittest.mock import MagicMock, patch

import pytest
import redis

from distance_calculator.errors import DeliveryRangeError, ErrorKind
from distance_calculator.indexing.geo_repository import GeoRepository
from distance_calculator.matching.models import Candidate
from distance_calculator.storage.redis_store import RedisStore


def _store():
    client = MagicMock()
    return RedisStore(client), client


@patch("distance_calculator.storage.redis_store.redis.Redis.from_url")
def test_from_url_decodes_responses(mock_from_url):
    store = RedisStore.from_url("redis://cache:6379/0")
    mock_from_url.assert_called_once_with("redis://cache:6379/0", decode_responses=True)
    assert store.client is mock_from_url.return_value


def test_set_uses_expiry_seconds():
    store, client = _store()
    store.set("coordinates:lat:00000", "[]", 45_000)
    client.set.assert_called_once_with("coordinates:lat:00000", "[]", ex=45_000)


def test_set_without_ttl_has_no_expiry():
    store, client = _store()
    store.set("k", "v", 0)
    client.set.assert_called_once_with("k", "v", ex=None)


def test_get_returns_value():
    store, client = _store()
    client.get.return_value = "payload"
    assert store.get("k") == "payload"


def test_get_missing_key_is_not_found():
    store, client = _store()
    client.get.return_value = None
    with pytest.raises(DeliveryRangeError) as exc_info:
        store.get("coordinates:lat:manifest")
    assert exc_info.value.kind is ErrorKind.not_found


def test_delete_forwards_key():
    store, client = _store()
    store.delete("restaurants:geodata")
    client.delete.assert_called_once_with("restaurants:geodata")


def test_geo_add_uses_member_name_and_sets_expiry():
    store, client = _store()
    store.geo_add("restaurants:geodata", "fra-1", 50.05, 8.67, 6, 45_000)
    client.geoadd.assert_called_once_with(
        "restaurants:geodata", [8.67, 50.05, "fra-1-50.050000-8.670000-6.000000"]
    )
    client.expire.assert_called_once_with("restaurants:geodata", 45_000)


def test_geo_add_without_ttl_keeps_key_persistent():
    store, client = _store()
    store.geo_add("restaurants:geodata", "fra-1", 50.05, 8.67, 6)
    client.expire.assert_not_called()


def test_geo_search_by_radius_in_km():
    store, client = _store()
    client.geosearch.return_value = ["fra-1-50.050000-8.670000-6.000000"]

    hits = store.geo_search("restaurants:geodata", 50.06, 8.68, 8.0)

    assert hits == ["fra-1-50.050000-8.670000-6.000000"]
    client.geosearch.assert_called_once_with(
        "restaurants:geodata", longitude=8.68, latitude=50.06, radius=8.0, unit="km", sort="ASC"
    )


def test_invalid_pair_response_is_invalid_query():
    store, client = _store()
    client.geosearch.side_effect = redis.ResponseError(
        "ERR invalid longitude,latitude pair 8.680000,89.900000"
    )
    with pytest.raises(DeliveryRangeError) as exc_info:
        store.geo_search("restaurants:geodata", 89.9, 8.68, 8.0)
    assert exc_info.value.kind is ErrorKind.invalid_query


def test_other_response_error_is_store_error():
    store, client = _store()
    client.get.side_effect = redis.ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
    with pytest.raises(DeliveryRangeError) as exc_info:
        store.get("restaurants:geodata")
    assert exc_info.value.kind is ErrorKind.store


def test_connection_error_is_store_error():
    store, client = _store()
    client.set.side_effect = redis.ConnectionError("Connection refused")
    with pytest.raises(DeliveryRangeError) as exc_info:
        store.set("k", "v", 60)
    assert exc_info.value.kind is ErrorKind.store
    assert "Connection refused" in exc_info.value.message


def test_geo_repository_treats_rejected_pair_as_no_matches():
    store, client = _store()
    client.geosearch.side_effect = redis.ResponseError("ERR invalid longitude,latitude pair 8.680000,89.900000")
    repository = GeoRepository(store, ttl_seconds=60)

    assert asyncio.run(repository.find_in_radius(89.9, 8.68, 8.0)) == []


def test_geo_repository_parses_redis_members():
    store, client = _store()
    client.geosearch.return_value = ["fra-1-50.050000-8.670000-6.000000"]
    repository = GeoRepository(store, ttl_seconds=60)

    assert asyncio.run(repository.find_in_radius(50.06, 8.68, 8.0)) == [
        Candidate(id="fra-1", lat=50.05, long=8.67, radius=6.0)
    ]
