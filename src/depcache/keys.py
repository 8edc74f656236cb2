"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache key normalization.

Short alphanumeric keys are stored as-is so they stay readable in the backend.
Everything else is reduced to the md5 hex digest of a canonical encoding, which
keeps keys backend-safe and identical across processes.
"""

from __future__ import annotations

import dataclasses
import hashlib
import io
import json
import re
import socket
import types
from collections.abc import Callable, Mapping, Sequence, Set
from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel

from .errors import InvalidKeyError

CacheKey: TypeAlias = (
    str | int | float | bool | None | Sequence[Any] | Mapping[Any, Any] | object
)

MAX_PLAIN_KEY_LENGTH = 32

_PLAIN_KEY_RE = re.compile(rf"[A-Za-z0-9]{{1,{MAX_PLAIN_KEY_LENGTH}}}")

_UNSERIALIZABLE = (
    io.IOBase,
    socket.socket,
    types.GeneratorType,
    types.CoroutineType,
    types.FrameType,
)


def _type_name(value: object) -> str:
    kind = type(value)
    return f"{kind.__module__}.{kind.__qualname__}"


def _canonical(value: Any, seen: set[int]) -> Any:
    """Convert one key value into a JSON-ready structure with stable ordering."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return {"__enum__": _type_name(value), "value": _canonical(value.value, seen)}
    if isinstance(value, (bytes, bytearray)):
        return {"__bytes__": bytes(value).hex()}
    if isinstance(value, _UNSERIALIZABLE):
        raise InvalidKeyError(
            f"Cache key contains a value that cannot be serialized: {_type_name(value)}"
        )

    marker = id(value)
    if marker in seen:
        raise InvalidKeyError("Cache key contains a circular reference")
    seen.add(marker)
    try:
        if isinstance(value, BaseModel):
            payload = value.model_dump(mode="json")
            return {"__type__": _type_name(value), "fields": _canonical(payload, seen)}
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            fields = {
                field.name: getattr(value, field.name)
                for field in dataclasses.fields(value)
            }
            return {"__type__": _type_name(value), "fields": _canonical(fields, seen)}
        if isinstance(value, Mapping):
            items = [
                (_encode(_canonical(k, seen)) if not isinstance(k, str) else k, v)
                for k, v in value.items()
            ]
            return {k: _canonical(v, seen) for k, v in sorted(items, key=lambda kv: kv[0])}
        if isinstance(value, Set):
            return {"__set__": sorted(_encode(_canonical(v, seen)) for v in value)}
        if isinstance(value, Sequence):
            return [_canonical(v, seen) for v in value]
        if isinstance(value, (types.FunctionType, types.BuiltinFunctionType, types.MethodType)):
            return {"__callable__": f"{value.__module__}.{value.__qualname__}"}
        if isinstance(value, type):
            return {"__class__": f"{value.__module__}.{value.__qualname__}"}

        try:
            attrs = vars(value)
        except TypeError:
            attrs = {
                name: getattr(value, name)
                for name in getattr(type(value), "__slots__", ())
                if hasattr(value, name)
            }
        public = {k: v for k, v in attrs.items() if not k.startswith("_")}
        return {"__type__": _type_name(value), "fields": _canonical(public, seen)}
    finally:
        seen.discard(marker)


def _encode(structure: Any) -> str:
    return json.dumps(
        structure, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def canonical_key_bytes(key: CacheKey) -> bytes:
    """
    Serialize `key` into the canonical byte form used for hashing.

    Raises:
        InvalidKeyError: If any part of the key has no deterministic encoding.
    """
    return _encode(_canonical(key, set())).encode("utf-8")


def normalize_key(key: CacheKey) -> str:
    """
    Map an application key onto a backend-safe storage key.

    - integers become their decimal form
    - alphanumeric strings of at most 32 characters pass through
    - other strings and all structured keys become a 32-char md5 hex digest
    """
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    if isinstance(key, str):
        if _PLAIN_KEY_RE.fullmatch(key):
            return key
        return hashlib.md5(key.encode("utf-8")).hexdigest()
    return hashlib.md5(canonical_key_bytes(key)).hexdigest()


class CacheKeyNormalizer:
    """Callable wrapper around `normalize_key` that can be swapped in tests."""

    normalize: Callable[[CacheKey], str] = staticmethod(normalize_key)

    def __call__(self, key: CacheKey) -> str:
        return self.normalize(key)
