"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Redis-backed storage backend for multi-process deployments.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from redis.exceptions import RedisError

from ..serializers import PickleSerializer, Serializer
from ..ttl import TtlLike, normalize_ttl
from .base import validate_key, validate_keys

logger = logging.getLogger("depcache.backends.redis")


class RedisCacheBackend:
    """
    Storage backend over a synchronous ``redis.Redis`` client.

    Connection errors are logged and reported as a failed operation (`False`
    or the default value); the cache facade turns failed writes into typed
    errors carrying the key.

    Args:
        redis: A ``redis.Redis`` client instance.
        prefix: Key prefix for namespacing. `clear()` only removes prefixed
            keys when a prefix is set and flushes the database otherwise.
        serializer: Value serializer, pickle by default.
    """

    backend_id = "redis"

    def __init__(
        self,
        redis: Any,
        *,
        prefix: str = "",
        serializer: Serializer | None = None,
    ) -> None:
        self._redis = redis
        self._prefix = prefix
        self._serializer = serializer or PickleSerializer()

    def _k(self, key: str) -> str:
        return self._prefix + key

    def get(self, key: str, default: Any = None) -> Any:
        validate_key(key)
        try:
            blob = self._redis.get(self._k(key))
        except RedisError:
            logger.warning("Redis GET failed for key %s", key, exc_info=True)
            return default
        if blob is None:
            return default
        return self._serializer.unserialize(blob)

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        keys = list(keys)
        validate_keys(keys)
        if not keys:
            return {}
        try:
            blobs = self._redis.mget([self._k(key) for key in keys])
        except RedisError:
            logger.warning("Redis MGET failed for %d keys", len(keys), exc_info=True)
            return dict.fromkeys(keys, default)
        return {
            key: default if blob is None else self._serializer.unserialize(blob)
            for key, blob in zip(keys, blobs)
        }

    def set(self, key: str, value: Any, ttl: TtlLike = None) -> bool:
        validate_key(key)
        seconds = normalize_ttl(ttl)
        if seconds is not None and seconds <= 0:
            return self.delete(key)
        try:
            return bool(
                self._redis.set(self._k(key), self._serializer.serialize(value), ex=seconds)
            )
        except RedisError:
            logger.warning("Redis SET failed for key %s", key, exc_info=True)
            return False

    def set_multiple(self, values: Mapping[str, Any], ttl: TtlLike = None) -> bool:
        validate_keys(values.keys())
        seconds = normalize_ttl(ttl)
        if seconds is not None and seconds <= 0:
            return self.delete_multiple(values.keys())
        if not values:
            return True
        try:
            pipe = self._redis.pipeline()
            for key, value in values.items():
                pipe.set(self._k(key), self._serializer.serialize(value), ex=seconds)
            results = pipe.execute()
        except RedisError:
            logger.warning("Redis pipeline SET failed for %d keys", len(values), exc_info=True)
            return False
        return all(bool(result) for result in results)

    def delete(self, key: str) -> bool:
        validate_key(key)
        try:
            self._redis.delete(self._k(key))
        except RedisError:
            logger.warning("Redis DEL failed for key %s", key, exc_info=True)
            return False
        return True

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        keys = list(keys)
        validate_keys(keys)
        if not keys:
            return True
        try:
            self._redis.delete(*[self._k(key) for key in keys])
        except RedisError:
            logger.warning("Redis DEL failed for %d keys", len(keys), exc_info=True)
            return False
        return True

    def clear(self) -> bool:
        try:
            if not self._prefix:
                self._redis.flushdb()
                return True
            batch: list[Any] = []
            for name in self._redis.scan_iter(match=f"{self._prefix}*"):
                batch.append(name)
                if len(batch) >= 500:
                    self._redis.delete(*batch)
                    batch.clear()
            if batch:
                self._redis.delete(*batch)
        except RedisError:
            logger.warning("Redis clear failed for prefix %r", self._prefix, exc_info=True)
            return False
        return True

    def has(self, key: str) -> bool:
        validate_key(key)
        try:
            return bool(self._redis.exists(self._k(key)))
        except RedisError:
            logger.warning("Redis EXISTS failed for key %s", key, exc_info=True)
            return False
