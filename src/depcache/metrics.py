"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Metrics adapters for cache hit/miss observability.
"""

from __future__ import annotations

from collections.abc import Mapping
from threading import Lock
from typing import Protocol

from prometheus_client import REGISTRY, CollectorRegistry, Counter

CACHE_HITS = "cache_hits"
CACHE_MISSES = "cache_misses"
CACHE_WRITES = "cache_writes"
CACHE_WRITE_FAILURES = "cache_write_failures"
CACHE_REMOVALS = "cache_removals"


class CacheMetrics(Protocol):
    """Counter sink the cache facade reports to."""

    def incr(
        self,
        name: str,
        value: int = 1,
        *,
        tags: Mapping[str, str] | None = None,
    ) -> None: ...


class NoOpCacheMetrics:
    """Default metrics sink that discards everything."""

    def incr(
        self,
        name: str,
        value: int = 1,
        *,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        _ = name
        _ = value
        _ = tags


class PrometheusCacheMetrics(CacheMetrics):
    """
    Cache counters exported through `prometheus_client`.

    One `Counter` is created lazily per metric name and label set, so
    `cache_hits` with a `backend` tag is exposed as
    `depcache_cache_hits_total{backend="inmemory"}`.

    Args:
        namespace: Prefix of every exported metric name.
        registry: Collector registry, the process default when omitted.
    """

    def __init__(
        self,
        *,
        namespace: str = "depcache",
        registry: CollectorRegistry | None = None,
    ) -> None:
        self._namespace = namespace
        self._registry = registry if registry is not None else REGISTRY
        self._counters: dict[tuple[str, tuple[str, ...]], Counter] = {}
        self._lock = Lock()

    def incr(self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None) -> None:
        labels = dict(tags or {})
        counter = self._counter(name, tuple(sorted(labels)))
        if labels:
            counter.labels(**{label: str(raw) for label, raw in labels.items()}).inc(value)
        else:
            counter.inc(value)

    def _counter(self, name: str, label_names: tuple[str, ...]) -> Counter:
        with self._lock:
            counter = self._counters.get((name, label_names))
            if counter is None:
                counter = Counter(
                    name,
                    f"depcache metric {name}",
                    labelnames=label_names,
                    namespace=self._namespace,
                    registry=self._registry,
                )
                self._counters[(name, label_names)] = counter
            return counter
