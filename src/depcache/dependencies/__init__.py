"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache dependencies: conditions that invalidate a cached value before its TTL.
"""

from .base import Dependency, DependencyStore, ReusableDependencyData, reusable_scope
from .composite import AllDependencies, AnyDependency
from .file import FileDependency
from .tag import DEFAULT_TAG_NAMESPACE, TagDependency, build_tag_key
from .value import CallbackDependency, ValueDependency

__all__ = [
    "Dependency",
    "DependencyStore",
    "ReusableDependencyData",
    "reusable_scope",
    "ValueDependency",
    "CallbackDependency",
    "FileDependency",
    "TagDependency",
    "DEFAULT_TAG_NAMESPACE",
    "build_tag_key",
    "AllDependencies",
    "AnyDependency",
]
