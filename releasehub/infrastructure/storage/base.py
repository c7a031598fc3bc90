from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO


class ArtifactStorage(ABC):
    """Flat key/value namespace holding release metadata and blobs."""

    @abstractmethod
    def is_direct_child(self, key: str) -> bool:
        """Return True when the key names an entry directly under the root."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if an entry is stored under the key."""

    @abstractmethod
    def open_new(self, key: str) -> BinaryIO:
        """Create a new entry for writing. Raises FileExistsError if taken."""

    @abstractmethod
    def open_read(self, key: str) -> BinaryIO:
        """Open an entry for reading. Raises FileNotFoundError if absent."""

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """Atomically store the full value under the key."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the full value. Raises FileNotFoundError if absent."""

    @abstractmethod
    def list_keys(self) -> list[str]:
        """Return all committed keys, in storage order."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete an entry.
        Returns True if it was removed, False if it was already absent.
        """
