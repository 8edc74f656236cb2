"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dependency base class and the shared memo for reusable dependencies.
"""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from threading import Lock
from typing import Any, Protocol, runtime_checkable

from ..keys import canonical_key_bytes


@runtime_checkable
class DependencyStore(Protocol):
    """Minimal store contract dependencies read and write fingerprints through."""

    def get_multiple(self, keys: Iterable[Any], default: Any = None) -> dict[Any, Any]: ...

    def set_multiple(self, values: Mapping[Any, Any], ttl: Any = None) -> bool: ...


class ReusableDependencyData:
    """
    Process-wide memo of fingerprints for reusable dependencies.

    Keyed by the sha1 of a dependency's identity. Entries live until `reset()`
    is called at the end of a unit of work (request, job, ...).
    """

    def __init__(self) -> None:
        self._rows: dict[str, Any] = {}
        self._lock = Lock()

    def get_or_compute(self, key: str, factory: Any) -> Any:
        with self._lock:
            if key in self._rows:
                return self._rows[key]
        value = factory()
        with self._lock:
            # Last writer wins when two threads compute the same fingerprint.
            self._rows[key] = value
        return value

    def reset(self) -> None:
        with self._lock:
            self._rows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


_REUSABLE = ReusableDependencyData()


class Dependency(ABC):
    """
    Base class for cache dependencies.

    A dependency captures a fingerprint of some external condition when a value
    is written (`evaluate`) and later reports whether that condition moved
    (`is_changed`). Subclasses implement `generate_data` and `identity`.
    """

    def __init__(self) -> None:
        self._data: Any = None
        self._is_reusable = False

    @property
    def data(self) -> Any:
        """Fingerprint captured by the last `evaluate` call."""
        return self._data

    @property
    def is_reusable(self) -> bool:
        return self._is_reusable

    def mark_as_reusable(self) -> Dependency:
        """
        Generate dependency data only once per unit of work.

        Several cache calls sharing an equivalent dependency then reuse one
        fingerprint until `Dependency.reset_reusable_data()` is called.
        """
        self._is_reusable = True
        return self

    def evaluate(self, cache: DependencyStore) -> None:
        """Capture the current fingerprint. Invoked once per cache write."""
        if not self._is_reusable:
            self._data = self.generate_data(cache)
            return
        self._data = _REUSABLE.get_or_compute(
            self.reusable_hash(), lambda: self.generate_data(cache)
        )

    def is_changed(self, cache: DependencyStore) -> bool:
        """Recompute the fingerprint and compare it with the captured one."""
        if not self._is_reusable:
            return self._data != self.generate_data(cache)
        current = _REUSABLE.get_or_compute(
            self.reusable_hash(), lambda: self.generate_data(cache)
        )
        return self._data != current

    def reusable_hash(self) -> str:
        """Stable hash of this dependency's configuration, excluding captured data."""
        payload = json.dumps(
            [f"{type(self).__module__}.{type(self).__qualname__}", self.identity()],
            sort_keys=True,
            default=_identity_default,
        )
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()

    @staticmethod
    def reset_reusable_data() -> None:
        """Drop all memoized fingerprints of reusable dependencies."""
        _REUSABLE.reset()

    @abstractmethod
    def identity(self) -> Any:
        """JSON-ready description of what this dependency watches."""

    @abstractmethod
    def generate_data(self, cache: DependencyStore) -> Any:
        """Compute the fingerprint used to detect changes."""


def _identity_default(value: Any) -> str:
    return canonical_key_bytes(value).decode("utf-8")


@contextmanager
def reusable_scope() -> Iterator[None]:
    """
    Mark one unit of work for reusable dependencies.

    Memoized fingerprints are dropped when the block exits::

        with reusable_scope():
            handle_request()
    """
    try:
        yield
    finally:
        Dependency.reset_reusable_data()
