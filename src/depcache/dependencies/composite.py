"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dependencies composed of other dependencies.

`AllDependencies` reports a change only once every child changed,
`AnyDependency` as soon as one did.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..errors import InvalidArgumentError
from .base import Dependency, DependencyStore


class _CompositeDependency(Dependency):
    """Shared plumbing for composites: validation and delegated evaluation."""

    def __init__(self, dependencies: Iterable[Dependency] = ()) -> None:
        super().__init__()
        children = list(dependencies)
        for child in children:
            if not isinstance(child, Dependency):
                raise InvalidArgumentError(
                    f'The dependency must be a "{Dependency.__qualname__}" instance, '
                    f'"{type(child).__qualname__}" received'
                )
        self._dependencies = children

    @property
    def dependencies(self) -> list[Dependency]:
        return list(self._dependencies)

    def identity(self) -> Any:
        return [
            [f"{type(dep).__module__}.{type(dep).__qualname__}", dep.identity()]
            for dep in self._dependencies
        ]

    def evaluate(self, cache: DependencyStore) -> None:
        for dependency in self._dependencies:
            dependency.evaluate(cache)

    def generate_data(self, cache: DependencyStore) -> Any:
        return [dependency.generate_data(cache) for dependency in self._dependencies]


class AllDependencies(_CompositeDependency):
    """Reported as changed only if every sub-dependency is changed."""

    def is_changed(self, cache: DependencyStore) -> bool:
        for dependency in self._dependencies:
            if not dependency.is_changed(cache):
                return False
        return True


class AnyDependency(_CompositeDependency):
    """Reported as changed if any sub-dependency is changed."""

    def is_changed(self, cache: DependencyStore) -> bool:
        for dependency in self._dependencies:
            if dependency.is_changed(cache):
                return True
        return False
