"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Storage backends the cache facade delegates raw reads and writes to.
"""

from .base import BaseStorageBackend, StorageBackend
from .file import FileCacheBackend
from .inmemory import InMemoryCacheBackend
from .null import NullCacheBackend
from .prefixed import PrefixedCacheBackend
from .registry import (
    get_cache_backend,
    list_cache_backends,
    register_cache_backend,
    unregister_cache_backend,
)

__all__ = [
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
]


def __getattr__(name: str):
    """Lazily expose the Redis backend so `redis` is imported only on use."""
    if name == "RedisCacheBackend":
        from .redis import RedisCacheBackend

        return RedisCacheBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
