from __future__ import annotations

import logging
import time
from typing import BinaryIO, Protocol

from jinja2 import Environment, StrictUndefined
from pydantic import ValidationError as PydanticValidationError

from releasehub.core.locks import ReadWriteLock
from releasehub.domain.release import Release, ReleaseDraft
from releasehub.exceptions.exceptions import (
    ArtifactNotFoundError,
    ReleaseNotFoundError,
    StorageError,
    ValidationError,
)
from releasehub.infrastructure.checksum import copy_hashed
from releasehub.infrastructure.release_ids import (
    META_SUFFIX,
    ReleaseIdGenerator,
    blob_key,
    is_well_formed,
    meta_key,
)
from releasehub.infrastructure.storage.base import ArtifactStorage

logger = logging.getLogger(__name__)

FILENAME_DATE_FORMAT = "%Y%m%d%H%M%S"

_filename_env = Environment(autoescape=False, undefined=StrictUndefined)


class Sink(Protocol):
    def write(self, data: bytes, /) -> object: ...


def render_file_name(release: Release, template: str) -> str:
    """Attachment filename for a release, e.g. ``release-1.2-20260216013000.bin``."""
    rendered = _filename_env.from_string(template).render(
        version=release.version,
        date=release.created_at.strftime(FILENAME_DATE_FORMAT),
    )
    return rendered.strip().replace('"', "").replace("/", "_") or f"{release.id}.bin"


class ReleaseStore:
    """
    Durable release artifacts: one JSON metadata record and one binary blob
    per release id under a single storage root.

    One reader/writer lock guards the whole store. ``publish`` and
    ``unpublish`` hold it exclusively; ``get``, ``list`` and ``stream`` share
    it. Nothing is cached between calls, storage is the source of truth.
    """

    def __init__(
        self,
        storage: ArtifactStorage,
        *,
        id_generator: ReleaseIdGenerator | None = None,
        chunk_size: int = 1024 * 1024,
    ):
        self.storage = storage
        self.id_generator = id_generator or ReleaseIdGenerator(storage)
        self.chunk_size = chunk_size
        self._lock = ReadWriteLock()

    def _validate_id(self, release_id: str) -> None:
        if not release_id:
            raise ValidationError("Release id is required")
        if not is_well_formed(release_id):
            raise ValidationError("Malformed release id")
        if not (self.storage.is_direct_child(blob_key(release_id)) and self.storage.is_direct_child(meta_key(release_id))):
            raise ValidationError("Release id escapes the release root")

    def _read_metadata(self, release_id: str) -> Release:
        try:
            raw = self.storage.get(meta_key(release_id))
        except FileNotFoundError as exc:
            raise ReleaseNotFoundError(f"Release {release_id} not found") from exc
        except OSError as exc:
            raise StorageError(f"Cannot read release {release_id}: {exc}") from exc
        try:
            return Release.model_validate_json(raw)
        except PydanticValidationError as exc:
            raise StorageError(f"Corrupt metadata for release {release_id}") from exc

    def publish(self, draft: ReleaseDraft, reader: BinaryIO) -> Release:
        draft.validate()
        started = time.perf_counter()
        with self._lock.write_locked():
            created_at = self.id_generator.clock()
            release_id = self.id_generator.new_release_id(created_at)
            data_key = blob_key(release_id)
            try:
                handle = self.storage.open_new(data_key)
            except OSError as exc:
                raise StorageError(f"Cannot create release blob {release_id}: {exc}") from exc

            try:
                with handle:
                    hasher = copy_hashed(reader, handle, self.chunk_size)
                release = Release(
                    id=release_id,
                    version=draft.version.strip(),
                    description=(draft.description or "").strip(),
                    created_at=created_at,
                    size_bytes=hasher.size_bytes,
                    checksum_sha256=hasher.hexdigest(),
                )
                # metadata last: a crash before this leaves only an orphaned blob
                self.storage.put(meta_key(release_id), release.model_dump_json().encode("utf-8"))
            except Exception as exc:
                self._discard_blob(data_key)
                if isinstance(exc, OSError):
                    raise StorageError(f"Cannot write release {release_id}: {exc}") from exc
                raise

        logger.info(
            "[release_publish] id=%s version=%s size_bytes=%s elapsed_ms=%s",
            release.id,
            release.version,
            release.size_bytes,
            int((time.perf_counter() - started) * 1000),
        )
        return release

    def _discard_blob(self, data_key: str) -> None:
        try:
            self.storage.delete(data_key)
        except OSError as exc:
            logger.warning("[release_publish] failed to remove partial blob %s: %s", data_key, exc)

    def get(self, release_id: str) -> Release:
        self._validate_id(release_id)
        with self._lock.read_locked():
            return self._read_metadata(release_id)

    def list(self) -> list[Release]:
        with self._lock.read_locked():
            try:
                keys = self.storage.list_keys()
            except OSError as exc:
                raise StorageError(f"Cannot list releases: {exc}") from exc
            releases = []
            for key in keys:
                if not key.endswith(META_SUFFIX):
                    continue
                release_id = key[: -len(META_SUFFIX)]
                if not is_well_formed(release_id):
                    continue
                try:
                    releases.append(self._read_metadata(release_id))
                except ReleaseNotFoundError:
                    # removed between listing and reading
                    continue
        return sorted(releases, key=lambda release: release.created_at, reverse=True)

    def unpublish(self, release_id: str) -> None:
        self._validate_id(release_id)
        with self._lock.write_locked():
            try:
                removed_blob = self.storage.delete(blob_key(release_id))
                removed_meta = self.storage.delete(meta_key(release_id))
            except OSError as exc:
                raise StorageError(f"Cannot remove release {release_id}: {exc}") from exc
        if not (removed_blob or removed_meta):
            raise ReleaseNotFoundError(f"Release {release_id} not found")
        if removed_blob != removed_meta:
            logger.warning(
                "[release_unpublish] id=%s was incomplete (blob=%s metadata=%s)",
                release_id,
                removed_blob,
                removed_meta,
            )
        logger.info("[release_unpublish] id=%s", release_id)

    def stream(self, release_id: str, sink: Sink) -> int:
        self._validate_id(release_id)
        written = 0
        with self._lock.read_locked():
            self._read_metadata(release_id)
            try:
                handle = self.storage.open_read(blob_key(release_id))
            except FileNotFoundError as exc:
                raise ArtifactNotFoundError(f"Release data file for {release_id} was not found") from exc
            except OSError as exc:
                raise StorageError(f"Cannot open release {release_id}: {exc}") from exc
            with handle:
                while True:
                    chunk = handle.read(self.chunk_size)
                    if not chunk:
                        break
                    sink.write(chunk)
                    written += len(chunk)
        return written
