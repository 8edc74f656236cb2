from __future__ import annotations

import pytest

from depcache import (
    Cache,
    CacheSettings,
    FileCacheBackend,
    InMemoryCacheBackend,
    NullCacheBackend,
    create_backend,
    create_cache,
    create_cache_from_env,
)
from depcache.backends.redis import RedisCacheBackend

_ENV_NAMES = [
    "DEPCACHE_BACKEND",
    "DEPCACHE_DEFAULT_TTL_S",
    "DEPCACHE_KEY_PREFIX",
    "DEPCACHE_BETA",
    "DEPCACHE_FILE_PATH",
    "DEPCACHE_FILE_DIRECTORY_LEVEL",
    "DEPCACHE_FILE_GC_PROBABILITY",
    "DEPCACHE_REDIS_URL",
    "DEPCACHE_REDIS_HOST",
    "DEPCACHE_REDIS_PORT",
    "DEPCACHE_REDIS_DB",
    "DEPCACHE_REDIS_PASSWORD",
    "DEPCACHE_REDIS_PREFIX",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults_from_empty_env():
    settings = CacheSettings.from_env()
    assert settings == CacheSettings()
    assert settings.backend == "inmemory"
    assert settings.default_ttl_s is None
    assert settings.redis_url is None


def test_settings_read_env(monkeypatch):
    monkeypatch.setenv("DEPCACHE_BACKEND", "File")
    monkeypatch.setenv("DEPCACHE_DEFAULT_TTL_S", "120")
    monkeypatch.setenv("DEPCACHE_KEY_PREFIX", "app_")
    monkeypatch.setenv("DEPCACHE_BETA", "2.5")
    monkeypatch.setenv("DEPCACHE_FILE_PATH", "/tmp/depcache")
    monkeypatch.setenv("DEPCACHE_FILE_DIRECTORY_LEVEL", "2")
    monkeypatch.setenv("DEPCACHE_FILE_GC_PROBABILITY", "0")

    settings = CacheSettings.from_env()
    assert settings.backend == "file"
    assert settings.default_ttl_s == 120
    assert settings.key_prefix == "app_"
    assert settings.beta == 2.5
    assert settings.file_path == "/tmp/depcache"
    assert settings.file_directory_level == 2
    assert settings.file_gc_probability == 0


def test_default_ttl_accepts_forever(monkeypatch):
    monkeypatch.setenv("DEPCACHE_DEFAULT_TTL_S", "forever")
    assert CacheSettings.from_env().default_ttl_s is None


def test_redis_url_built_from_host_parts(monkeypatch):
    monkeypatch.setenv("DEPCACHE_REDIS_HOST", "cache.internal")
    monkeypatch.setenv("DEPCACHE_REDIS_PORT", "6380")
    monkeypatch.setenv("DEPCACHE_REDIS_DB", "3")
    monkeypatch.setenv("DEPCACHE_REDIS_PASSWORD", "s3cret")
    assert CacheSettings.from_env().redis_url == "redis://:s3cret@cache.internal:6380/3"

    monkeypatch.setenv("DEPCACHE_REDIS_URL", "redis://explicit:6379/1")
    assert CacheSettings.from_env().redis_url == "redis://explicit:6379/1"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("inmemory", InMemoryCacheBackend),
        ("memory", InMemoryCacheBackend),
        ("null", NullCacheBackend),
        ("off", NullCacheBackend),
    ],
)
def test_create_backend_by_name(name, expected):
    assert isinstance(create_backend(CacheSettings(backend=name)), expected)


def test_create_file_backend(tmp_path):
    backend = create_backend(
        CacheSettings(backend="file", file_path=str(tmp_path / "c"), file_gc_probability=0)
    )
    assert isinstance(backend, FileCacheBackend)
    assert backend.cache_path == tmp_path / "c"


def test_create_redis_backend_uses_given_client():
    client = object()
    backend = create_backend(
        CacheSettings(backend="redis", redis_prefix="svc:"), redis_client=client
    )
    assert isinstance(backend, RedisCacheBackend)


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError, match="Unknown DEPCACHE_BACKEND"):
        create_backend(CacheSettings(backend="memcached"))


def test_create_cache_applies_settings():
    cache = create_cache(CacheSettings(default_ttl_s=30, key_prefix="p_"))
    assert isinstance(cache, Cache)
    assert cache.default_ttl == 30
    assert cache.key_prefix == "p_"


def test_create_cache_from_env(monkeypatch):
    monkeypatch.setenv("DEPCACHE_BACKEND", "null")
    monkeypatch.setenv("DEPCACHE_DEFAULT_TTL_S", "5")
    cache = create_cache_from_env()
    assert cache.handler.backend_id == "null"
    assert cache.default_ttl == 5
    assert cache.set("k", "v") is True
    assert cache.get("k") is None
