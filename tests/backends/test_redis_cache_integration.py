from __future__ import annotations

import os
import uuid

import pytest

from depcache import Cache, TagDependency, Ttl
from depcache.backends.redis import RedisCacheBackend


def _redis_url() -> str | None:
    return os.getenv("DEPCACHE_TEST_REDIS_URL")


@pytest.mark.skipif(_redis_url() is None, reason="DEPCACHE_TEST_REDIS_URL is not set")
def test_tagged_entries_with_real_redis():
    redis = pytest.importorskip("redis")
    client = redis.Redis.from_url(_redis_url())
    prefix = f"itest:cache:{uuid.uuid4().hex}:"
    backend = RedisCacheBackend(client, prefix=prefix)
    cache = Cache(backend, default_ttl=Ttl.minutes(5))

    calls = []

    def producer(_):
        calls.append(1)
        return {"generation": len(calls)}

    first = cache.get_or_set(("profile", 7), producer, dependency=TagDependency("user-7"))
    second = cache.get_or_set(("profile", 7), producer, dependency=TagDependency("user-7"))
    assert first == second == {"generation": 1}

    TagDependency.invalidate(cache, "user-7")
    third = cache.get_or_set(("profile", 7), producer, dependency=TagDependency("user-7"))
    assert third == {"generation": 2}

    assert client.ttl(prefix + cache.build_key(("profile", 7))) > 0

    assert backend.clear() is True
    assert list(client.scan_iter(match=f"{prefix}*")) == []
    client.close()
