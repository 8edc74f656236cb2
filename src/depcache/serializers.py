"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Value serializers used by backends that persist bytes.
"""

from __future__ import annotations

import json
import pickle
from collections.abc import Callable
from typing import Any, Protocol


class Serializer(Protocol):
    """Turns cache values into bytes and back."""

    def serialize(self, value: Any) -> bytes: ...

    def unserialize(self, data: bytes) -> Any: ...


class PickleSerializer:
    """Default serializer; round-trips any picklable Python value."""

    def __init__(self, *, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self._protocol = protocol

    def serialize(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self._protocol)

    def unserialize(self, data: bytes) -> Any:
        return pickle.loads(data)


class JsonSerializer:
    """JSON serializer for values shared with non-Python consumers."""

    def serialize(self, value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def unserialize(self, data: bytes) -> Any:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)


class CallbackSerializer:
    """Serializer delegating to user supplied callables."""

    def __init__(
        self,
        serialize: Callable[[Any], bytes],
        unserialize: Callable[[bytes], Any],
    ) -> None:
        self._serialize = serialize
        self._unserialize = unserialize

    def serialize(self, value: Any) -> bytes:
        return self._serialize(value)

    def unserialize(self, data: bytes) -> Any:
        return self._unserialize(data)
