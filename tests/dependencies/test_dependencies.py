from __future__ import annotations

import os

import pytest

from depcache import (
    AllDependencies,
    AnyDependency,
    CallbackDependency,
    Dependency,
    FileDependency,
    InMemoryCacheBackend,
    InvalidArgumentError,
    TagDependency,
    ValueDependency,
    reusable_scope,
)
from depcache.dependencies import build_tag_key


@pytest.fixture(autouse=True)
def _reset_reusable():
    Dependency.reset_reusable_data()
    yield
    Dependency.reset_reusable_data()


class _Flag:
    def __init__(self, value: object = 0) -> None:
        self.value = value
        self.calls = 0

    def read(self) -> object:
        self.calls += 1
        return self.value


def test_value_dependency_captures_snapshot():
    store = InMemoryCacheBackend()
    dependency = ValueDependency({"version": 3})
    dependency.evaluate(store)
    assert dependency.data == {"version": 3}
    assert dependency.is_changed(store) is False


def test_callback_dependency_tracks_callback_result():
    store = InMemoryCacheBackend()
    flag = _Flag("a")
    dependency = CallbackDependency(flag.read)
    dependency.evaluate(store)
    assert dependency.is_changed(store) is False

    flag.value = "b"
    assert dependency.is_changed(store) is True
    # is_changed never refreshes the captured fingerprint
    assert dependency.is_changed(store) is True
    assert dependency.data == "a"


def test_file_dependency_tracks_mtime(tmp_path):
    store = InMemoryCacheBackend()
    path = tmp_path / "config.ini"
    path.write_text("a=1", encoding="utf-8")
    os.utime(path, ns=(1_000_000_000, 1_000_000_000))

    dependency = FileDependency(path)
    dependency.evaluate(store)
    assert dependency.is_changed(store) is False

    os.utime(path, ns=(2_000_000_000, 2_000_000_000))
    assert dependency.is_changed(store) is True


def test_file_dependency_handles_missing_file(tmp_path):
    store = InMemoryCacheBackend()
    path = tmp_path / "later.txt"
    dependency = FileDependency(path)
    dependency.evaluate(store)
    assert dependency.data is None
    assert dependency.is_changed(store) is False

    path.write_text("now", encoding="utf-8")
    assert dependency.is_changed(store) is True


def test_tag_dependency_round_trip():
    store = InMemoryCacheBackend()
    dependency = TagDependency("user-42")
    dependency.evaluate(store)
    assert dependency.is_changed(store) is False

    TagDependency.invalidate(store, "user-42")
    assert dependency.is_changed(store) is True


def test_tag_dependency_ignores_unrelated_tags():
    store = InMemoryCacheBackend()
    dependency = TagDependency(["a", "b"])
    dependency.evaluate(store)

    TagDependency.invalidate(store, "c")
    assert dependency.is_changed(store) is False

    TagDependency.invalidate(store, ["c", "b"])
    assert dependency.is_changed(store) is True


def test_tag_dependency_creates_baseline_for_new_tags():
    store = InMemoryCacheBackend()
    key = build_tag_key("fresh")
    assert store.has(key) is False

    dependency = TagDependency("fresh")
    dependency.evaluate(store)
    assert store.has(key) is True
    assert dependency.data == [store.get(key)]

    # a second dependency on the same tag reuses the stored timestamp
    other = TagDependency("fresh")
    other.evaluate(store)
    assert other.data == dependency.data
    assert other.is_changed(store) is False


def test_tag_fingerprint_is_list_of_timestamp_strings():
    store = InMemoryCacheBackend()
    dependency = TagDependency(["x", "y"])
    dependency.evaluate(store)
    assert isinstance(dependency.data, list)
    assert len(dependency.data) == 2
    assert all(isinstance(stamp, str) for stamp in dependency.data)


def test_tag_dependency_reports_changed_when_tag_key_disappears():
    store = InMemoryCacheBackend()
    dependency = TagDependency("gone")
    dependency.evaluate(store)
    store.clear()
    assert dependency.is_changed(store) is True


def test_tag_namespaces_are_isolated():
    store = InMemoryCacheBackend()
    dependency = TagDependency("shared", namespace="app-a")
    dependency.evaluate(store)

    TagDependency.invalidate(store, "shared", namespace="app-b")
    assert dependency.is_changed(store) is False

    TagDependency.invalidate(store, "shared", namespace="app-a")
    assert dependency.is_changed(store) is True


def test_empty_tag_list_never_changes():
    store = InMemoryCacheBackend()
    dependency = TagDependency([])
    dependency.evaluate(store)
    assert dependency.data == []
    assert dependency.is_changed(store) is False


@pytest.mark.parametrize("ttl", [0, -5, 1.5, True])
def test_tag_ttl_must_be_positive_or_forever(ttl):
    with pytest.raises(InvalidArgumentError, match="Tag TTL"):
        TagDependency("t", ttl=ttl)
    with pytest.raises(InvalidArgumentError, match="Tag TTL"):
        TagDependency.invalidate(InMemoryCacheBackend(), "t", ttl=ttl)


def test_all_dependencies_changes_only_when_every_child_changed():
    store = InMemoryCacheBackend()
    first = _Flag(1)
    second = _Flag(1)
    dependency = AllDependencies(
        [CallbackDependency(first.read), CallbackDependency(second.read)]
    )
    dependency.evaluate(store)
    assert dependency.is_changed(store) is False

    first.value = 2
    assert dependency.is_changed(store) is False

    second.value = 2
    assert dependency.is_changed(store) is True


def test_any_dependency_changes_when_one_child_changed():
    store = InMemoryCacheBackend()
    first = _Flag(1)
    second = _Flag(1)
    dependency = AnyDependency(
        [CallbackDependency(first.read), CallbackDependency(second.read)]
    )
    dependency.evaluate(store)
    assert dependency.is_changed(store) is False

    second.value = 2
    assert dependency.is_changed(store) is True


def test_composites_accept_tag_children():
    store = InMemoryCacheBackend()
    dependency = AnyDependency([TagDependency("a"), ValueDependency(1)])
    dependency.evaluate(store)
    assert dependency.is_changed(store) is False
    TagDependency.invalidate(store, "a")
    assert dependency.is_changed(store) is True


@pytest.mark.parametrize("composite", [AllDependencies, AnyDependency])
def test_composites_reject_non_dependencies(composite):
    with pytest.raises(InvalidArgumentError, match="must be a"):
        composite([ValueDependency(1), "not-a-dependency"])


def test_reusable_dependency_generates_data_once_per_unit_of_work():
    store = InMemoryCacheBackend()
    flag = _Flag("v1")
    read = flag.read
    first = CallbackDependency(read).mark_as_reusable()
    second = CallbackDependency(read).mark_as_reusable()

    first.evaluate(store)
    second.evaluate(store)
    assert flag.calls == 1
    assert first.reusable_hash() == second.reusable_hash()

    flag.value = "v2"
    # memoized fingerprint still in effect for this unit of work
    assert first.is_changed(store) is False

    Dependency.reset_reusable_data()
    assert first.is_changed(store) is True
    assert flag.calls == 2


def test_reusable_scope_resets_memo_on_exit():
    store = InMemoryCacheBackend()
    flag = _Flag(1)
    dependency = CallbackDependency(flag.read).mark_as_reusable()

    with reusable_scope():
        dependency.evaluate(store)
        dependency.evaluate(store)
        assert flag.calls == 1

    dependency.evaluate(store)
    assert flag.calls == 2


def test_reusable_hash_depends_on_configuration_not_data():
    store = InMemoryCacheBackend()
    dependency = ValueDependency([1, 2]).mark_as_reusable()
    before = dependency.reusable_hash()
    dependency.evaluate(store)
    assert dependency.reusable_hash() == before
    assert ValueDependency([2, 1]).reusable_hash() != before
    assert TagDependency("a").reusable_hash() != TagDependency("b").reusable_hash()
