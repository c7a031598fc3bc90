from __future__ import annotations

import hashlib
from typing import BinaryIO


class StreamingSHA256:
    """Running SHA-256 digest and byte count of a release blob."""

    def __init__(self):
        self._hasher = hashlib.sha256()
        self._size_bytes = 0

    @property
    def size_bytes(self) -> int:
        return self._size_bytes

    def update(self, chunk: bytes) -> None:
        self._hasher.update(chunk)
        self._size_bytes += len(chunk)

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()


def copy_hashed(reader: BinaryIO, writer: BinaryIO, chunk_size: int) -> StreamingSHA256:
    """Copy ``reader`` into ``writer`` chunk by chunk, hashing what was written."""
    digest = StreamingSHA256()
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            break
        writer.write(chunk)
        digest.update(chunk)
    writer.flush()
    return digest
