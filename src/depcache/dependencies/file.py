"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dependency on a file's last modification time.
"""

from __future__ import annotations

import os
from pathlib import Path

from .base import Dependency, DependencyStore


class FileDependency(Dependency):
    """Changed when the file's mtime differs from the captured one, including creation or removal."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def identity(self) -> str:
        return str(self._path)

    def generate_data(self, cache: DependencyStore) -> int | None:
        _ = cache
        try:
            return self._path.stat().st_mtime_ns
        except FileNotFoundError:
            return None
