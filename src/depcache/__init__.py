"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dependency-aware caching on top of pluggable key/value backends.

Quick start::

    from depcache import Cache, InMemoryCacheBackend, TagDependency, Ttl

    cache = Cache(InMemoryCacheBackend(), default_ttl=Ttl.minutes(5))
    profile = cache.get_or_set(
        ("profile", 42),
        lambda cache: load_profile(42),
        dependency=TagDependency("user-42"),
    )

    TagDependency.invalidate(cache, "user-42")
"""

from .backends import (
    BaseStorageBackend,
    FileCacheBackend,
    InMemoryCacheBackend,
    NullCacheBackend,
    PrefixedCacheBackend,
    StorageBackend,
    get_cache_backend,
    list_cache_backends,
    register_cache_backend,
    unregister_cache_backend,
)
from .cache import Cache
from .dependencies import (
    AllDependencies,
    AnyDependency,
    CallbackDependency,
    Dependency,
    FileDependency,
    TagDependency,
    ValueDependency,
    reusable_scope,
)
from .errors import (
    CacheBackendError,
    CacheError,
    InvalidArgumentError,
    InvalidKeyError,
    RemoveCacheError,
    SetCacheError,
)
from .factory import create_backend, create_cache, create_cache_from_env
from .keys import CacheKey, CacheKeyNormalizer, normalize_key
from .metadata import CacheItem, CacheItems
from .metrics import CacheMetrics, NoOpCacheMetrics, PrometheusCacheMetrics
from .serializers import CallbackSerializer, JsonSerializer, PickleSerializer, Serializer
from .settings import CacheSettings
from .ttl import Ttl, normalize_ttl

__all__ = [
    "Cache",
    "CacheSettings",
    "create_backend",
    "create_cache",
    "create_cache_from_env",
    "CacheKey",
    "CacheKeyNormalizer",
    "normalize_key",
    "Ttl",
    "normalize_ttl",
    "CacheItem",
    "CacheItems",
    "Dependency",
    "ValueDependency",
    "CallbackDependency",
    "FileDependency",
    "TagDependency",
    "AllDependencies",
    "AnyDependency",
    "reusable_scope",
    "StorageBackend",
    "BaseStorageBackend",
    "InMemoryCacheBackend",
    "NullCacheBackend",
    "FileCacheBackend",
    "PrefixedCacheBackend",
    "register_cache_backend",
    "get_cache_backend",
    "list_cache_backends",
    "unregister_cache_backend",
    "Serializer",
    "PickleSerializer",
    "JsonSerializer",
    "CallbackSerializer",
    "CacheMetrics",
    "NoOpCacheMetrics",
    "PrometheusCacheMetrics",
    "CacheError",
    "SetCacheError",
    "RemoveCacheError",
    "InvalidArgumentError",
    "InvalidKeyError",
    "CacheBackendError",
]


def __getattr__(name: str):
    """Lazily expose optional backends that require extra dependencies."""
    if name == "RedisCacheBackend":
        from .backends.redis import RedisCacheBackend

        return RedisCacheBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
