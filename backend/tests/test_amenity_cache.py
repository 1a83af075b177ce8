import json
from unittest.mock import MagicMock

from parcelgeo.services.osm import AmenityCache


def make_cache():
    redis_client = MagicMock()
    return AmenityCache(redis_client=redis_client, ttl_seconds=60), redis_client


def test_set_uses_ttl():
    cache, redis_client = make_cache()
    cache.set({"elements": []}, -6.8, 39.28, 5000, 1000)

    key, ttl, payload = redis_client.setex.call_args.args
    assert key.startswith("amenities:")
    assert ttl == 60
    assert json.loads(payload) == {"elements": []}


def test_get_hit():
    cache, redis_client = make_cache()
    redis_client.get.return_value = json.dumps({"elements": [1]})

    assert cache.get(-6.8, 39.28, 5000, 1000) == {"elements": [1]}


def test_key_depends_on_origin_and_radii():
    cache, _ = make_cache()
    base = cache._generate_cache_key(-6.8, 39.28, 5000, 1000)

    assert base == cache._generate_cache_key(-6.800001, 39.280001, 5000, 1000)
    assert base != cache._generate_cache_key(-6.81, 39.28, 5000, 1000)
    assert base != cache._generate_cache_key(-6.8, 39.28, 3000, 1000)


def test_redis_errors_degrade_to_miss():
    cache, redis_client = make_cache()
    redis_client.get.side_effect = ConnectionError("redis down")
    redis_client.setex.side_effect = ConnectionError("redis down")

    assert cache.get(-6.8, 39.28, 5000, 1000) is None
    cache.set({"elements": []}, -6.8, 39.28, 5000, 1000)
