"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Storage backend protocol and a base class supplying the batch operations.
"""

from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from ..errors import InvalidArgumentError
from ..ttl import TtlLike, normalize_ttl

EXPIRATION_INFINITY = 0
EXPIRATION_EXPIRED = -1

_RESERVED_KEY_CHARS = re.compile(r"[{}()/\\@:]")


@runtime_checkable
class StorageBackend(Protocol):
    """
    Primitive key/value store the cache facade delegates to.

    Keys are already-normalized strings. TTL is whole seconds, `None` meaning
    the entry never expires and `<= 0` meaning the entry is removed.
    """

    backend_id: str

    def get(self, key: str, default: Any = None) -> Any: ...

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]: ...

    def set(self, key: str, value: Any, ttl: TtlLike = None) -> bool: ...

    def set_multiple(self, values: Mapping[str, Any], ttl: TtlLike = None) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def delete_multiple(self, keys: Iterable[str]) -> bool: ...

    def clear(self) -> bool: ...

    def has(self, key: str) -> bool: ...


class BaseStorageBackend(ABC):
    """
    Convenience base for adapters that only implement single-key primitives.

    Batch operations loop over the primitives and report success only when
    every individual call succeeded.
    """

    backend_id: str = "base"

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any: ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl: TtlLike = None) -> bool: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...

    @abstractmethod
    def clear(self) -> bool: ...

    @abstractmethod
    def has(self, key: str) -> bool: ...

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        keys = list(keys)
        validate_keys(keys)
        return {key: self.get(key, default) for key in keys}

    def set_multiple(self, values: Mapping[str, Any], ttl: TtlLike = None) -> bool:
        validate_keys(values.keys())
        ok = True
        for key, value in values.items():
            ok = self.set(str(key), value, ttl) and ok
        return ok

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        keys = list(keys)
        validate_keys(keys)
        ok = True
        for key in keys:
            ok = self.delete(key) and ok
        return ok


def validate_key(key: Any) -> None:
    """Reject keys that are not non-empty strings or contain reserved characters."""
    if not isinstance(key, str) or not key or _RESERVED_KEY_CHARS.search(key):
        raise InvalidArgumentError(f"Invalid key value {key!r}.")


def validate_keys(keys: Iterable[Any]) -> None:
    for key in keys:
        validate_key(key)


def ttl_to_expiration(ttl: TtlLike, *, now: float | None = None) -> float:
    """
    Convert a TTL into an absolute expiration timestamp.

    Returns `EXPIRATION_INFINITY` for forever and `EXPIRATION_EXPIRED` for a
    non-positive TTL.
    """
    seconds = normalize_ttl(ttl)
    if seconds is None:
        return EXPIRATION_INFINITY
    if seconds <= 0:
        return EXPIRATION_EXPIRED
    return (time.time() if now is None else now) + seconds
