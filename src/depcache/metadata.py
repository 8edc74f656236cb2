"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Per-key metadata tracked by the cache facade next to the stored values.

The index is advisory, in-process state. Keys missing from it are simply not
tracked and the backend's own TTL stays authoritative for them.
"""

from __future__ import annotations

import math
import random
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from threading import RLock

from .dependencies import Dependency, DependencyStore
from .errors import InvalidArgumentError

RandomSource = Callable[[], float]


def uniform_open_closed() -> float:
    """Uniform draw in (0, 1]."""
    return 1.0 - random.random()


@dataclass(slots=True)
class CacheItem:
    """
    Metadata of one cache entry.

    Attributes:
        key: Normalized storage key.
        expiry: Absolute unix timestamp, `None` meaning no time based expiry.
        dependency: Dependency evaluated when the entry was written.
        created_at: Wall clock time of the last write, anchor for early expiry.
    """

    key: str
    expiry: int | None = None
    dependency: Dependency | None = None
    created_at: float = field(default_factory=time.time)

    def update(self, expiry: int | None, dependency: Dependency | None) -> None:
        """Replace expiry and dependency and restart the staleness clock."""
        self.expiry = expiry
        self.dependency = dependency
        self.created_at = time.time()

    def expired(
        self,
        beta: float,
        cache: DependencyStore,
        *,
        rng: RandomSource | None = None,
    ) -> bool:
        """
        Whether the entry must be treated as stale.

        Besides the hard expiry this applies probabilistic early expiration
        (XFetch): an entry is recomputed before its expiry with a probability
        that grows as the expiry approaches. `beta > 1` favours earlier
        recomputation, `beta = 0` disables it.

        Raises:
            InvalidArgumentError: If `beta` is negative.
        """
        if beta < 0:
            raise InvalidArgumentError(
                f'Argument "beta" must be a positive number, {beta:f} given.'
            )

        if self.expiry is not None:
            now = time.time()
            if self.expiry <= now:
                return True
            delta = math.ceil(1000 * (now - self.created_at)) / 1000
            draw = (rng or uniform_open_closed)()
            if self.expiry <= now - delta * beta * math.log(draw):
                return True

        return self.dependency is not None and self.dependency.is_changed(cache)


class CacheItems:
    """Thread-safe index of `CacheItem` records by normalized key."""

    def __init__(self) -> None:
        self._items: dict[str, CacheItem] = {}
        self._lock = RLock()

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def get(self, key: str) -> CacheItem | None:
        with self._lock:
            return self._items.get(key)

    def set(
        self,
        key: str,
        expiry: int | None,
        dependency: Dependency | None = None,
    ) -> CacheItem:
        """Create or refresh the record for `key`."""
        with self._lock:
            item = self._items.get(key)
            if item is None:
                item = CacheItem(key=key, expiry=expiry, dependency=dependency)
                self._items[key] = item
            else:
                item.update(expiry, dependency)
            return item

    def expired(
        self,
        key: str,
        beta: float,
        cache: DependencyStore,
        *,
        rng: RandomSource | None = None,
    ) -> bool:
        """Whether `key` is tracked and stale. Untracked keys are never expired."""
        item = self.get(key)
        if item is None:
            return False
        return item.expired(beta, cache, rng=rng)

    def remove(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def remove_multiple(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items
