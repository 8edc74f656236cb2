"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Process-local storage backend.
"""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass
from threading import RLock
from typing import Any

from ..ttl import TtlLike
from .base import (
    EXPIRATION_EXPIRED,
    EXPIRATION_INFINITY,
    BaseStorageBackend,
    ttl_to_expiration,
    validate_key,
)


@dataclass(slots=True)
class _Row:
    """One stored value with its absolute expiration (0 = never)."""

    value: Any
    expiration: float


class InMemoryCacheBackend(BaseStorageBackend):
    """
    Dict-backed store suitable for development, tests and per-process caching.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    backend_id = "inmemory"

    def __init__(self) -> None:
        self._rows: dict[str, _Row] = {}
        self._lock = RLock()

    def get(self, key: str, default: Any = None) -> Any:
        validate_key(key)
        with self._lock:
            row = self._live_row(key)
            if row is None:
                return default
            return copy.deepcopy(row.value)

    def set(self, key: str, value: Any, ttl: TtlLike = None) -> bool:
        validate_key(key)
        expiration = ttl_to_expiration(ttl)
        if expiration == EXPIRATION_EXPIRED:
            return self.delete(key)
        with self._lock:
            self._rows[key] = _Row(value=copy.deepcopy(value), expiration=expiration)
        return True

    def delete(self, key: str) -> bool:
        validate_key(key)
        with self._lock:
            self._rows.pop(key, None)
        return True

    def clear(self) -> bool:
        with self._lock:
            self._rows.clear()
        return True

    def has(self, key: str) -> bool:
        validate_key(key)
        with self._lock:
            return self._live_row(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._rows) if self._live_row(key) is not None)

    def _live_row(self, key: str) -> _Row | None:
        row = self._rows.get(key)
        if row is None:
            return None
        if row.expiration != EXPIRATION_INFINITY and row.expiration <= time.time():
            self._rows.pop(key, None)
            return None
        return row
