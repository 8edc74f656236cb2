"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache settings and explicit config loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def _optional_int(raw: str | None) -> int | None:
    if raw is None or raw.lower() in ("none", "forever"):
        return None
    return int(raw)


@dataclass(frozen=True, slots=True)
class CacheSettings:
    """Explicit settings used to build a cache and its backend."""

    backend: str = "inmemory"
    default_ttl_s: int | None = None
    key_prefix: str = ""
    beta: float = 1.0

    file_path: str = ".depcache"
    file_directory_level: int = 1
    file_gc_probability: int = 10

    redis_url: str | None = None
    redis_prefix: str = ""

    @staticmethod
    def from_env() -> "CacheSettings":
        """Load settings from `DEPCACHE_*` environment variables."""
        return CacheSettings(
            backend=(env_first("DEPCACHE_BACKEND", default="inmemory") or "inmemory").lower(),
            default_ttl_s=_optional_int(env_first("DEPCACHE_DEFAULT_TTL_S")),
            key_prefix=env_first("DEPCACHE_KEY_PREFIX", default="") or "",
            beta=float(env_first("DEPCACHE_BETA", default="1.0") or "1.0"),
            file_path=env_first("DEPCACHE_FILE_PATH", default=".depcache") or ".depcache",
            file_directory_level=int(
                env_first("DEPCACHE_FILE_DIRECTORY_LEVEL", default="1") or "1"
            ),
            file_gc_probability=int(
                env_first("DEPCACHE_FILE_GC_PROBABILITY", default="10") or "10"
            ),
            redis_url=_redis_url_from_env(),
            redis_prefix=env_first("DEPCACHE_REDIS_PREFIX", default="") or "",
        )


def _redis_url_from_env() -> str | None:
    url = env_first("DEPCACHE_REDIS_URL")
    if url:
        return url
    host = env_first("DEPCACHE_REDIS_HOST")
    if host is None:
        return None
    port = env_first("DEPCACHE_REDIS_PORT", default="6379") or "6379"
    db = env_first("DEPCACHE_REDIS_DB", default="0") or "0"
    password = env_first("DEPCACHE_REDIS_PASSWORD", default="") or ""
    if password:
        return f"redis://:{password}@{host}:{port}/{db}"
    return f"redis://{host}:{port}/{db}"
