"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Exception types raised by the cache facade, dependencies and backends.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .metadata import CacheItem


class InvalidArgumentError(ValueError):
    """Raised for caller errors such as a negative beta or an unsupported TTL."""


class InvalidKeyError(InvalidArgumentError):
    """Raised when a cache key cannot be serialized deterministically."""


class CacheError(RuntimeError):
    """Base error for failures at the storage backend boundary."""

    def __init__(self, key: str, message: str = "") -> None:
        super().__init__(message or f"Cache operation failed for key '{key}'")
        self.key = key


class SetCacheError(CacheError):
    """
    Raised when the backend rejects a write.

    Carries the value and the metadata record that would have been stored so
    callers can log or retry without re-deriving context.
    """

    def __init__(
        self,
        key: str,
        value: Any,
        item: CacheItem | None = None,
        *,
        ttl: int | None = None,
    ) -> None:
        super().__init__(key, f"Failed to store the value in the cache for key '{key}'")
        self.value = value
        self.item = item
        self.ttl = ttl


class RemoveCacheError(CacheError):
    """Raised when the backend rejects a delete."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Failed to delete the cache entry for key '{key}'")


class CacheBackendError(RuntimeError):
    """Raised when storage backend registration/resolution fails."""
