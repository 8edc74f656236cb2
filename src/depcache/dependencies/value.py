"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dependencies backed by a fixed value or a user callback.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .base import Dependency, DependencyStore


class ValueDependency(Dependency):
    """
    Dependency on a value snapshot.

    Unchanged if and only if the value given to the constructor equals the one
    captured when the data was stored.
    """

    def __init__(self, value: Any) -> None:
        super().__init__()
        self._value = value

    def identity(self) -> Any:
        return self._value

    def generate_data(self, cache: DependencyStore) -> Any:
        _ = cache
        return self._value


class CallbackDependency(Dependency):
    """
    Dependency on the result of a callback.

    Unchanged if and only if the callback returns the same result as when the
    data was stored.
    """

    def __init__(self, callback: Callable[[], Any]) -> None:
        super().__init__()
        self._callback = callback

    def identity(self) -> Any:
        callback = self._callback
        name = getattr(callback, "__qualname__", type(callback).__qualname__)
        module = getattr(callback, "__module__", type(callback).__module__)
        # Lambdas share a qualname, so the object id keeps them apart.
        return f"{module}.{name}:{id(callback)}"

    def generate_data(self, cache: DependencyStore) -> Any:
        _ = cache
        return self._callback()
