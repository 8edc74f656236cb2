"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for building a cache from settings or environment variables.
"""

from __future__ import annotations

from typing import Any

from .backends.base import StorageBackend
from .backends.file import FileCacheBackend
from .backends.inmemory import InMemoryCacheBackend
from .backends.null import NullCacheBackend
from .cache import Cache
from .metrics import CacheMetrics
from .settings import CacheSettings


def create_backend(
    settings: CacheSettings,
    *,
    redis_client: Any | None = None,
) -> StorageBackend:
    """
    Build the storage backend named by `settings.backend`.

    Backends:
    - `inmemory` (default)
    - `null`
    - `file`
    - `redis`

    Redis resolution:
    - Uses the provided `redis_client` when supplied.
    - Otherwise builds a client from `settings.redis_url`
      (default `redis://localhost:6379/0`).
    """
    backend = settings.backend.strip().lower()

    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return InMemoryCacheBackend()

    if backend in ("null", "none", "off"):
        return NullCacheBackend()

    if backend in ("file", "filesystem"):
        return FileCacheBackend(
            settings.file_path,
            directory_level=settings.file_directory_level,
            gc_probability=settings.file_gc_probability,
        )

    if backend in ("redis",):
        from .backends.redis import RedisCacheBackend

        client = redis_client
        if client is None:
            import redis

            client = redis.Redis.from_url(settings.redis_url or "redis://localhost:6379/0")
        return RedisCacheBackend(client, prefix=settings.redis_prefix)

    raise ValueError(f"Unknown DEPCACHE_BACKEND: {backend}")


def create_cache(
    settings: CacheSettings | None = None,
    *,
    redis_client: Any | None = None,
    metrics: CacheMetrics | None = None,
) -> Cache:
    """Build a `Cache` facade and its backend from explicit settings."""
    settings = settings or CacheSettings()
    return Cache(
        create_backend(settings, redis_client=redis_client),
        default_ttl=settings.default_ttl_s,
        key_prefix=settings.key_prefix,
        beta=settings.beta,
        metrics=metrics,
    )


def create_cache_from_env(
    *,
    redis_client: Any | None = None,
    metrics: CacheMetrics | None = None,
) -> Cache:
    """Create a cache from `DEPCACHE_*` environment variables."""
    return create_cache(
        CacheSettings.from_env(), redis_client=redis_client, metrics=metrics
    )
