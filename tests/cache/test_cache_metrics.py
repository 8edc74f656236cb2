from __future__ import annotations

from prometheus_client import CollectorRegistry

from depcache import (
    Cache,
    InMemoryCacheBackend,
    NoOpCacheMetrics,
    PrometheusCacheMetrics,
    TagDependency,
)


class _RecordingMetrics:
    def __init__(self) -> None:
        self.calls: list[tuple[str, int, dict[str, str]]] = []

    def incr(self, name, value=1, *, tags=None):
        self.calls.append((name, value, dict(tags or {})))


def test_cache_reports_hits_misses_and_writes():
    metrics = _RecordingMetrics()
    cache = Cache(InMemoryCacheBackend(), metrics=metrics)
    cache.get("a")
    cache.set("a", 1)
    cache.get("a")
    cache.remove("a")

    names = [name for name, _, _ in metrics.calls]
    assert names == ["cache_misses", "cache_writes", "cache_hits", "cache_removals"]
    assert all(tags == {"backend": "inmemory"} for _, _, tags in metrics.calls)


def test_prometheus_metrics_count_into_registry():
    registry = CollectorRegistry()
    cache = Cache(InMemoryCacheBackend(), metrics=PrometheusCacheMetrics(registry=registry))

    cache.get_or_set("k", lambda _: "v")
    cache.get_or_set("k", lambda _: "v")
    cache.set_multiple({"x": 1, "y": 2})

    labels = {"backend": "inmemory"}
    assert registry.get_sample_value("depcache_cache_misses_total", labels) == 1
    assert registry.get_sample_value("depcache_cache_hits_total", labels) == 1
    assert registry.get_sample_value("depcache_cache_writes_total", labels) == 3


def test_noop_metrics_accepts_anything():
    NoOpCacheMetrics().incr("anything", 5, tags={"a": "b"})


def test_tag_bookkeeping_is_not_counted_as_cache_traffic():
    metrics = _RecordingMetrics()
    cache = Cache(InMemoryCacheBackend(), metrics=metrics)
    cache.set("profile", "v", dependency=TagDependency(["user-42", "team-7"]))
    assert [name for name, _, _ in metrics.calls] == ["cache_writes"]

    metrics.calls.clear()
    assert cache.get("profile") == "v"
    assert [(name, value) for name, value, _ in metrics.calls] == [("cache_hits", 1)]

    metrics.calls.clear()
    TagDependency.invalidate(cache, "user-42")
    assert metrics.calls == []
    assert cache.get("profile") is None
    assert [name for name, _, _ in metrics.calls] == ["cache_misses"]


def test_tag_bookkeeping_stays_out_of_the_metadata_index():
    cache = Cache(InMemoryCacheBackend(), key_prefix="app_")
    cache.get_or_set("report", lambda _: 1, dependency=TagDependency("reports"))
    TagDependency.invalidate(cache, "reports")
    assert len(cache.metadata) == 1
    assert cache.get("report") is None
