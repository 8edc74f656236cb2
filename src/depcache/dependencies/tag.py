"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Tag based dependency and bulk invalidation.
"""

from __future__ import annotations

import hashlib
import json
import time
import uuid
from collections.abc import Iterable
from typing import Any

from ..errors import InvalidArgumentError
from ..ttl import Ttl
from .base import Dependency, DependencyStore

DEFAULT_TAG_NAMESPACE = "depcache.TagDependency"


def _tag_list(tags: str | Iterable[str]) -> list[str]:
    if isinstance(tags, str):
        return [tags]
    return [str(tag) for tag in tags]


def _check_tag_ttl(ttl: int | None) -> int | None:
    if ttl is not None and (isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0):
        raise InvalidArgumentError(
            f"Tag TTL must be a positive integer or None (forever), got {ttl!r}"
        )
    return ttl


def build_tag_key(tag: str, *, namespace: str = DEFAULT_TAG_NAMESPACE) -> str:
    """Storage key holding the current timestamp of `tag`."""
    return hashlib.md5(
        json.dumps([namespace, tag], ensure_ascii=False).encode("utf-8")
    ).hexdigest()


def _fresh_timestamp() -> str:
    # The suffix keeps two touches within one clock tick distinct.
    return f"{time.time():.6f} {uuid.uuid4().hex[:8]}"


class TagDependency(Dependency):
    """
    Associates a cached value with one or more tags.

    Invalidating a tag rewrites its timestamp key, so every value that captured
    the previous timestamp reports changed on its next read::

        cache.set("user_42_profile", profile, dependency=TagDependency("user-42"))
        cache.set("user_42_stats", stats, dependency=TagDependency("user-42"))

        TagDependency.invalidate(cache, "user-42")
    """

    def __init__(
        self,
        tags: str | Iterable[str],
        *,
        namespace: str = DEFAULT_TAG_NAMESPACE,
        ttl: int | None = None,
    ) -> None:
        super().__init__()
        self._tags = _tag_list(tags)
        self._namespace = namespace
        self._ttl = _check_tag_ttl(ttl)

    @property
    def tags(self) -> list[str]:
        return list(self._tags)

    def identity(self) -> Any:
        return {"namespace": self._namespace, "tags": self._tags}

    def generate_data(self, cache: DependencyStore) -> list[Any]:
        keys = self._keys()
        if not keys:
            return []
        stored = dict(cache.get_multiple(keys))
        missing = [key for key in keys if stored.get(key) is None]
        if missing:
            stored.update(_touch_keys(cache, missing, ttl=self._ttl))
        return [stored[key] for key in keys]

    def is_changed(self, cache: DependencyStore) -> bool:
        if self.is_reusable:
            return super().is_changed(cache)
        keys = self._keys()
        if not keys:
            return False
        stored = cache.get_multiple(keys)
        return [stored.get(key) for key in keys] != self._data

    @staticmethod
    def invalidate(
        cache: DependencyStore,
        tags: str | Iterable[str],
        *,
        namespace: str = DEFAULT_TAG_NAMESPACE,
        ttl: int | None = None,
    ) -> None:
        """
        Invalidate every cached value associated with any of `tags`.

        `cache` is a `Cache` facade or a bare store. Facades are written through
        their `dependency_store` so the touch is not counted as a cache write.
        """
        ttl = _check_tag_ttl(ttl)
        keys = [build_tag_key(tag, namespace=namespace) for tag in _tag_list(tags)]
        if keys:
            _touch_keys(getattr(cache, "dependency_store", cache), keys, ttl=ttl)

    def _keys(self) -> list[str]:
        return [build_tag_key(tag, namespace=self._namespace) for tag in self._tags]


def _touch_keys(
    cache: DependencyStore, keys: list[str], *, ttl: int | None
) -> dict[str, str]:
    stamp = _fresh_timestamp()
    values = {key: stamp for key in keys}
    cache.set_multiple(values, Ttl.forever() if ttl is None else ttl)
    return values
