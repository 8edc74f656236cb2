"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Backend decorator that namespaces every key.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..ttl import TtlLike
from .base import StorageBackend


class PrefixedCacheBackend:
    """
    Adds a fixed prefix to every key of the wrapped backend.

    Useful when several applications share one storage::

        backend = PrefixedCacheBackend(RedisCacheBackend(client), "billing_")
        backend.set("answer", 42)  # stored under "billing_answer"
    """

    def __init__(self, backend: StorageBackend, prefix: str) -> None:
        self._backend = backend
        self._prefix = prefix
        self.backend_id = f"prefixed:{backend.backend_id}"

    @property
    def inner(self) -> StorageBackend:
        return self._backend

    @property
    def prefix(self) -> str:
        return self._prefix

    def get(self, key: str, default: Any = None) -> Any:
        return self._backend.get(self._prefix + key, default)

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        keys = list(keys)
        found = self._backend.get_multiple([self._prefix + key for key in keys], default)
        return {key: found.get(self._prefix + key, default) for key in keys}

    def set(self, key: str, value: Any, ttl: TtlLike = None) -> bool:
        return self._backend.set(self._prefix + key, value, ttl)

    def set_multiple(self, values: Mapping[str, Any], ttl: TtlLike = None) -> bool:
        return self._backend.set_multiple(
            {self._prefix + key: value for key, value in values.items()}, ttl
        )

    def delete(self, key: str) -> bool:
        return self._backend.delete(self._prefix + key)

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        return self._backend.delete_multiple([self._prefix + key for key in keys])

    def clear(self) -> bool:
        return self._backend.clear()

    def has(self, key: str) -> bool:
        return self._backend.has(self._prefix + key)
