"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Registry of named storage backend instances.
"""

from __future__ import annotations

from threading import Lock

from ..errors import CacheBackendError
from .base import StorageBackend
from .inmemory import InMemoryCacheBackend

_REGISTRY: dict[str, StorageBackend] = {}
_LOCK = Lock()


def register_cache_backend(
    backend: StorageBackend,
    *,
    name: str | None = None,
    overwrite: bool = False,
) -> None:
    """Register one backend under `name` (defaults to its `backend_id`)."""
    key = (name or backend.backend_id).strip().lower()
    if not key:
        raise CacheBackendError("Cache backend id must be non-empty")

    with _LOCK:
        if key in _REGISTRY and not overwrite:
            raise CacheBackendError(f"Cache backend already registered: {key}")
        _REGISTRY[key] = backend


def get_cache_backend(backend: str | StorageBackend | None = None) -> StorageBackend:
    """Resolve a backend instance from id/instance/default."""
    if backend is None:
        key = "inmemory"
        with _LOCK:
            existing = _REGISTRY.get(key)
            if existing is None:
                existing = InMemoryCacheBackend()
                _REGISTRY[key] = existing
        return existing

    if not isinstance(backend, str):
        return backend

    key = backend.strip().lower()
    with _LOCK:
        resolved = _REGISTRY.get(key)
    if resolved is None:
        raise CacheBackendError(f"Unknown cache backend '{backend}'")
    return resolved


def unregister_cache_backend(name: str) -> None:
    """Drop one registered backend; unknown names are ignored."""
    with _LOCK:
        _REGISTRY.pop(name.strip().lower(), None)


def list_cache_backends() -> list[str]:
    """List registered backend ids."""
    with _LOCK:
        return sorted(_REGISTRY.keys())
