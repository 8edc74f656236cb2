"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache facade: key normalization, TTLs, dependencies and early expiration on
top of a plain storage backend.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Hashable, Iterable, Mapping
from typing import Any, TypeVar

from .backends.base import StorageBackend
from .backends.prefixed import PrefixedCacheBackend
from .dependencies import Dependency, DependencyStore
from .errors import InvalidArgumentError, RemoveCacheError, SetCacheError
from .keys import CacheKey, CacheKeyNormalizer
from .metadata import CacheItem, CacheItems, RandomSource
from .metrics import (
    CACHE_HITS,
    CACHE_MISSES,
    CACHE_REMOVALS,
    CACHE_WRITE_FAILURES,
    CACHE_WRITES,
    CacheMetrics,
    NoOpCacheMetrics,
)
from .ttl import TtlLike, normalize_ttl

logger = logging.getLogger("depcache.cache")

T = TypeVar("T")

_MISSING = object()


class Cache:
    """
    Public cache entry point.

    Values are stored raw in `handler`; expiry and dependency metadata live in
    an in-process index consulted before a stored value is trusted::

        cache = Cache(InMemoryCacheBackend(), default_ttl=Ttl.minutes(10))

        top = cache.get_or_set(
            ["top-products", 10],
            lambda cache: load_top_products(10),
            dependency=TagDependency("products"),
        )

        TagDependency.invalidate(cache, "products")

    A TTL of `None` on a write means "use `default_ttl`"; pass
    `Ttl.forever()` to store without expiry regardless of the default.

    Args:
        handler: Storage backend receiving raw reads and writes.
        default_ttl: TTL applied when a write passes none (`None` = forever).
        key_prefix: Prefix added to every normalized key.
        metrics: Counter sink for hits, misses and writes.
        beta: Default early expiration factor for `get_or_set`.
        rng: Uniform (0, 1] source for early expiration; injectable for tests.
    """

    def __init__(
        self,
        handler: StorageBackend,
        *,
        default_ttl: TtlLike = None,
        key_prefix: str = "",
        metrics: CacheMetrics | None = None,
        beta: float = 1.0,
        rng: RandomSource | None = None,
        normalizer: CacheKeyNormalizer | None = None,
    ) -> None:
        if beta < 0:
            raise InvalidArgumentError(
                f'Argument "beta" must be a positive number, {beta:f} given.'
            )
        self._backend = handler
        self._handler: StorageBackend = (
            PrefixedCacheBackend(handler, key_prefix) if key_prefix else handler
        )
        self._default_ttl = normalize_ttl(default_ttl)
        self._key_prefix = key_prefix
        self._metrics = metrics or NoOpCacheMetrics()
        self._beta = beta
        self._rng = rng
        self._normalizer = normalizer or CacheKeyNormalizer()
        self._items = CacheItems()
        self._store = _FingerprintStore(self._handler)
        self._tags = {"backend": handler.backend_id}

    @property
    def handler(self) -> StorageBackend:
        """Backend as seen by the facade, key prefix included."""
        return self._handler

    @property
    def dependency_store(self) -> DependencyStore:
        """Raw store dependencies keep their fingerprints in, bypassing metrics and the index."""
        return self._store

    @property
    def metadata(self) -> CacheItems:
        return self._items

    @property
    def default_ttl(self) -> int | None:
        return self._default_ttl

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    def build_key(self, key: CacheKey) -> str:
        """Normalize an application key into the storage key (prefix excluded)."""
        return self._normalizer(key)

    def get(self, key: CacheKey, default: Any = None) -> Any:
        """Return the stored value, or `default` when missing, expired or invalidated."""
        storage_key = self.build_key(key)
        if self._items.expired(storage_key, 0.0, self._store):
            self._metrics.incr(CACHE_MISSES, tags=self._tags)
            return default
        value = self._handler.get(storage_key, _MISSING)
        if value is _MISSING:
            self._metrics.incr(CACHE_MISSES, tags=self._tags)
            return default
        self._metrics.incr(CACHE_HITS, tags=self._tags)
        return value

    def has(self, key: CacheKey) -> bool:
        storage_key = self.build_key(key)
        if self._items.expired(storage_key, 0.0, self._store):
            return False
        return self._handler.has(storage_key)

    def set(
        self,
        key: CacheKey,
        value: Any,
        ttl: TtlLike = None,
        dependency: Dependency | None = None,
    ) -> bool:
        """
        Store `value` and record its metadata.

        Returns `False` (leaving any previous metadata in place) when the
        backend rejects the write.
        """
        storage_key = self.build_key(key)
        seconds = self._resolve_ttl(ttl)
        if dependency is not None:
            dependency.evaluate(self._store)
        if not self._handler.set(storage_key, value, seconds):
            logger.warning("Backend %s rejected write for key %s", self._backend.backend_id, storage_key)
            self._metrics.incr(CACHE_WRITE_FAILURES, tags=self._tags)
            return False
        self._items.set(storage_key, self._expiry(seconds), dependency)
        self._metrics.incr(CACHE_WRITES, tags=self._tags)
        return True

    def get_or_set(
        self,
        key: CacheKey,
        producer: Callable[[Cache], T],
        ttl: TtlLike = None,
        dependency: Dependency | None = None,
        beta: float | None = None,
    ) -> T:
        """
        Return the cached value for `key`, producing and storing it on a miss.

        The producer receives this cache so it can make nested cache calls. A
        tracked entry counts as a miss once it expired, its dependency changed,
        or probabilistic early expiration (scaled by `beta`) fires.

        Concurrent callers missing the same key may each run the producer;
        callers needing single-flight semantics must add their own lock.

        Raises:
            InvalidArgumentError: If `beta` is negative.
            SetCacheError: If the backend rejects the write. Metadata is left
                untouched in that case.
        """
        beta = self._beta if beta is None else beta
        if beta < 0:
            raise InvalidArgumentError(
                f'Argument "beta" must be a positive number, {beta:f} given.'
            )
        storage_key = self.build_key(key)
        seconds = self._resolve_ttl(ttl)

        if not self._items.expired(storage_key, beta, self._store, rng=self._rng):
            value = self._handler.get(storage_key, _MISSING)
            if value is not _MISSING:
                self._metrics.incr(CACHE_HITS, tags=self._tags)
                return value

        self._metrics.incr(CACHE_MISSES, tags=self._tags)
        logger.debug("Regenerating cache entry %s", storage_key)
        value = producer(self)
        if dependency is not None:
            dependency.evaluate(self._store)

        expiry = self._expiry(seconds)
        if not self._handler.set(storage_key, value, seconds):
            self._metrics.incr(CACHE_WRITE_FAILURES, tags=self._tags)
            raise SetCacheError(
                storage_key,
                value,
                CacheItem(key=storage_key, expiry=expiry, dependency=dependency),
                ttl=seconds,
            )

        self._items.set(storage_key, expiry, dependency)
        self._metrics.incr(CACHE_WRITES, tags=self._tags)
        return value

    def remove(self, key: CacheKey, *, strict: bool = False) -> bool:
        """
        Delete `key` from the backend and drop its metadata.

        Metadata is only dropped once the backend confirms the delete. With
        `strict=True` a failed delete raises `RemoveCacheError` instead of
        returning `False`.
        """
        storage_key = self.build_key(key)
        if self._handler.delete(storage_key):
            self._items.remove(storage_key)
            self._metrics.incr(CACHE_REMOVALS, tags=self._tags)
            return True
        logger.warning("Backend %s rejected delete for key %s", self._backend.backend_id, storage_key)
        if strict:
            raise RemoveCacheError(storage_key)
        return False

    def clear(self) -> bool:
        """Clear the backend and, on success, the metadata index."""
        if self._handler.clear():
            self._items.clear()
            return True
        logger.warning("Backend %s rejected clear", self._backend.backend_id)
        return False

    def get_multiple(self, keys: Iterable[CacheKey], default: Any = None) -> dict[Any, Any]:
        """
        Fetch several keys at once.

        The result is keyed by the keys as given, so they must be hashable
        (use tuples rather than lists for composite keys).
        """
        mapping: dict[Any, str] = {}
        for key in keys:
            if not isinstance(key, Hashable):
                raise InvalidArgumentError(
                    f"Batch keys must be hashable, got {type(key).__name__}"
                )
            mapping[key] = self.build_key(key)

        live = [
            storage_key
            for storage_key in dict.fromkeys(mapping.values())
            if not self._items.expired(storage_key, 0.0, self._store)
        ]
        found = self._handler.get_multiple(live, _MISSING) if live else {}

        results: dict[Any, Any] = {}
        for key, storage_key in mapping.items():
            value = found.get(storage_key, _MISSING)
            if value is _MISSING:
                self._metrics.incr(CACHE_MISSES, tags=self._tags)
                results[key] = default
            else:
                self._metrics.incr(CACHE_HITS, tags=self._tags)
                results[key] = value
        return results

    def set_multiple(
        self,
        values: Mapping[CacheKey, Any],
        ttl: TtlLike = None,
        dependency: Dependency | None = None,
    ) -> bool:
        """Store several values sharing one TTL and dependency."""
        seconds = self._resolve_ttl(ttl)
        if dependency is not None:
            dependency.evaluate(self._store)
        normalized = {self.build_key(key): value for key, value in values.items()}
        if not self._handler.set_multiple(normalized, seconds):
            logger.warning(
                "Backend %s rejected batch write of %d keys",
                self._backend.backend_id,
                len(normalized),
            )
            self._metrics.incr(CACHE_WRITE_FAILURES, len(normalized), tags=self._tags)
            return False
        expiry = self._expiry(seconds)
        for storage_key in normalized:
            self._items.set(storage_key, expiry, dependency)
        self._metrics.incr(CACHE_WRITES, len(normalized), tags=self._tags)
        return True

    def remove_multiple(self, keys: Iterable[CacheKey]) -> bool:
        """Delete several keys; metadata is dropped only if the backend succeeded."""
        storage_keys = [self.build_key(key) for key in keys]
        if not self._handler.delete_multiple(storage_keys):
            logger.warning(
                "Backend %s rejected batch delete of %d keys",
                self._backend.backend_id,
                len(storage_keys),
            )
            return False
        self._items.remove_multiple(storage_keys)
        self._metrics.incr(CACHE_REMOVALS, len(storage_keys), tags=self._tags)
        return True

    def _resolve_ttl(self, ttl: TtlLike) -> int | None:
        if ttl is None:
            return self._default_ttl
        return normalize_ttl(ttl)

    @staticmethod
    def _expiry(seconds: int | None) -> int | None:
        if seconds is None:
            return None
        return int(time.time()) + seconds


class _FingerprintStore:
    """
    Dependency-facing view of the facade's backend.

    Tag timestamps are bookkeeping, not cache traffic: they are read and written
    without touching counters or the metadata index.
    """

    def __init__(self, handler: StorageBackend) -> None:
        self._handler = handler

    def get_multiple(self, keys: Iterable[Any], default: Any = None) -> dict[Any, Any]:
        return self._handler.get_multiple(list(keys), default)

    def set_multiple(self, values: Mapping[Any, Any], ttl: TtlLike = None) -> bool:
        if not self._handler.set_multiple(dict(values), ttl):
            logger.warning(
                "Backend %s rejected %d dependency keys",
                self._handler.backend_id,
                len(values),
            )
            return False
        return True
