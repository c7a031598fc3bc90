from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO

from releasehub.infrastructure.storage.base import ArtifactStorage


class LocalFileSystemStorage(ArtifactStorage):
    """Local FS storage backend: one file per key directly under the root."""

    TEMP_PREFIX = "."

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _object_path(self, key: str) -> Path:
        if not self.is_direct_child(key):
            raise ValueError("Invalid storage key")
        return self.root / key

    def _temp_path(self, key: str) -> Path:
        return self.root / f"{self.TEMP_PREFIX}{key}.tmp"

    def is_direct_child(self, key: str) -> bool:
        if not key or key.startswith(self.TEMP_PREFIX):
            return False
        candidate = Path(key)
        if candidate.is_absolute() or len(candidate.parts) != 1:
            return False
        return (self.root / candidate).resolve().parent == self.root

    def exists(self, key: str) -> bool:
        path = self._object_path(key)
        try:
            path.stat()
        except FileNotFoundError:
            return False
        return True

    def open_new(self, key: str) -> BinaryIO:
        return self._object_path(key).open("xb")

    def open_read(self, key: str) -> BinaryIO:
        return self._object_path(key).open("rb")

    def put(self, key: str, data: bytes) -> None:
        path = self._object_path(key)
        tmp = self._temp_path(key)
        try:
            with tmp.open("wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            tmp.replace(path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    def get(self, key: str) -> bytes:
        return self._object_path(key).read_bytes()

    def list_keys(self) -> list[str]:
        with os.scandir(self.root) as entries:
            return [
                entry.name
                for entry in entries
                if entry.is_file() and not entry.name.startswith(self.TEMP_PREFIX)
            ]

    def delete(self, key: str) -> bool:
        path = self._object_path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
