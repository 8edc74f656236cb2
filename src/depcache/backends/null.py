"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Backend that stores nothing.
"""

from __future__ import annotations

from typing import Any

from ..ttl import TtlLike, normalize_ttl
from .base import BaseStorageBackend, validate_key


class NullCacheBackend(BaseStorageBackend):
    """
    Caches nothing and reports success for every write.

    Swap it in to disable caching without touching call sites.
    """

    backend_id = "null"

    def get(self, key: str, default: Any = None) -> Any:
        validate_key(key)
        return default

    def set(self, key: str, value: Any, ttl: TtlLike = None) -> bool:
        _ = value
        validate_key(key)
        normalize_ttl(ttl)
        return True

    def delete(self, key: str) -> bool:
        validate_key(key)
        return True

    def clear(self) -> bool:
        return True

    def has(self, key: str) -> bool:
        validate_key(key)
        return False
