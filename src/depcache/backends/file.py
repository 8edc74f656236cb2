"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Filesystem storage backend: one file per key, expiry kept in the file mtime.
"""

from __future__ import annotations

import logging
import os
import random
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any

from ..errors import CacheError, InvalidArgumentError
from ..serializers import PickleSerializer, Serializer
from ..ttl import TtlLike
from .base import (
    EXPIRATION_EXPIRED,
    EXPIRATION_INFINITY,
    BaseStorageBackend,
    ttl_to_expiration,
    validate_key,
)

logger = logging.getLogger("depcache.backends.file")


class FileCacheBackend(BaseStorageBackend):
    """
    Stores each value in a separate file under `cache_path`.

    The file mtime holds the absolute expiration; an mtime of 0 marks an entry
    that never expires. Expired files are garbage collected with probability
    `gc_probability` parts per million on every write.

    Args:
        cache_path: Directory holding the cache files. Created if missing.
        serializer: Value serializer, pickle by default.
        directory_level: Levels of two-character sub-directories used to
            spread files (0 stores everything flat).
        file_suffix: Suffix appended to every cache file.
        gc_probability: GC chance per write in parts per million (0..1000000).
        file_mode: Optional chmod applied to new cache files.
        dir_mode: Mode for newly created directories.
    """

    backend_id = "file"

    def __init__(
        self,
        cache_path: str | os.PathLike[str],
        *,
        serializer: Serializer | None = None,
        directory_level: int = 1,
        file_suffix: str = ".bin",
        gc_probability: int = 10,
        file_mode: int | None = None,
        dir_mode: int = 0o775,
    ) -> None:
        if not 0 <= gc_probability <= 1_000_000:
            raise ValueError("gc_probability must be between 0 and 1000000")
        self._path = Path(cache_path)
        self._serializer = serializer or PickleSerializer()
        self._directory_level = directory_level
        self._suffix = file_suffix
        self._gc_probability = gc_probability
        self._file_mode = file_mode
        self._dir_mode = dir_mode
        try:
            self._path.mkdir(mode=dir_mode, parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheError(str(self._path), f'Failed to create cache directory "{self._path}"') from exc
        self._root = self._path.resolve()

    @property
    def cache_path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        validate_key(key)
        path = self._file_for(key)
        if not self._exists_and_not_expired(path):
            return default
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return default
        return self._serializer.unserialize(data)

    def set(self, key: str, value: Any, ttl: TtlLike = None) -> bool:
        validate_key(key)
        self.gc()
        expiration = ttl_to_expiration(ttl)
        if expiration == EXPIRATION_EXPIRED:
            return self.delete(key)

        path = self._file_for(key)
        data = self._serializer.serialize(value)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(mode=self._dir_mode, parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            if self._file_mode is not None:
                os.chmod(tmp_name, self._file_mode)
            os.utime(tmp_name, (expiration, expiration))
            os.replace(tmp_name, path)
        except OSError:
            logger.warning("Failed to write cache file %s", path, exc_info=True)
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False
        return True

    def delete(self, key: str) -> bool:
        validate_key(key)
        try:
            self._file_for(key).unlink()
        except FileNotFoundError:
            return True
        except OSError:
            logger.warning("Failed to delete cache file for key %s", key, exc_info=True)
            return False
        return True

    def clear(self) -> bool:
        try:
            self._remove_files(self._path, expired_only=False)
        except OSError:
            logger.warning("Failed to clear cache directory %s", self._path, exc_info=True)
            return False
        return True

    def has(self, key: str) -> bool:
        validate_key(key)
        return self._exists_and_not_expired(self._file_for(key))

    def gc(self, *, force: bool = False) -> None:
        """Remove expired cache files, either always (`force`) or by chance."""
        if force or random.randint(0, 1_000_000) < self._gc_probability:
            self._remove_files(self._path, expired_only=True)

    def _file_for(self, key: str) -> Path:
        base = self._path
        for level in range(self._directory_level):
            part = key[level * 2 : level * 2 + 2]
            if part:
                base = base / part
        path = base / f"{key}{self._suffix}"
        if self._root not in path.resolve().parents:
            raise InvalidArgumentError(f"Invalid key value {key!r}.")
        return path

    def _exists_and_not_expired(self, path: Path) -> bool:
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return False
        return mtime == EXPIRATION_INFINITY or mtime > time.time()

    def _remove_files(self, path: Path, *, expired_only: bool) -> None:
        now = time.time()
        for entry in path.iterdir():
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                if expired_only:
                    self._remove_files(entry, expired_only=True)
                else:
                    shutil.rmtree(entry)
                continue
            if not expired_only:
                entry.unlink(missing_ok=True)
                continue
            mtime = entry.stat().st_mtime
            if mtime != EXPIRATION_INFINITY and mtime < now:
                entry.unlink(missing_ok=True)
