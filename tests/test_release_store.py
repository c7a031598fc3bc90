import hashlib
import io
import threading
from datetime import datetime, timezone

import pytest

from releasehub.domain.release import Release, ReleaseDraft
from releasehub.exceptions.exceptions import (
    ArtifactNotFoundError,
    NotFoundError,
    ReleaseNotFoundError,
    StorageError,
    ValidationError,
)
from releasehub.infrastructure.release_ids import ReleaseIdGenerator, blob_key, is_well_formed, meta_key
from releasehub.infrastructure.storage.local_fs import LocalFileSystemStorage
from releasehub.services.release_store import ReleaseStore, render_file_name


def publish(store, version="0.0.1", description="Test publish", payload=b"RELEASE"):
    return store.publish(ReleaseDraft(version=version, description=description), io.BytesIO(payload))


class RecordingStorage(LocalFileSystemStorage):
    def __init__(self, root):
        super().__init__(root)
        self.calls = []

    def exists(self, key):
        self.calls.append(("exists", key))
        return super().exists(key)

    def get(self, key):
        self.calls.append(("get", key))
        return super().get(key)

    def open_read(self, key):
        self.calls.append(("open_read", key))
        return super().open_read(key)

    def delete(self, key):
        self.calls.append(("delete", key))
        return super().delete(key)


class FailingMetadataStorage(LocalFileSystemStorage):
    def put(self, key, data):
        raise OSError(28, "No space left on device")


class BrokenReader:
    def __init__(self, error):
        self.error = error
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        if self.reads > 1:
            raise self.error
        return b"PART"


def test_publish_get_stream_round_trip(store, storage):
    payload = b"RELEASE" * 10
    release = publish(store, payload=payload)

    assert is_well_formed(release.id)
    assert release.created_at.tzinfo is not None
    assert release.size_bytes == len(payload)
    assert release.checksum_sha256 == hashlib.sha256(payload).hexdigest()

    fetched = store.get(release.id)
    assert fetched == release
    assert fetched.version == "0.0.1"
    assert fetched.description == "Test publish"

    sink = io.BytesIO()
    assert store.stream(release.id, sink) == len(payload)
    assert sink.getvalue() == payload
    assert storage.get(blob_key(release.id)) == payload


def test_publish_strips_fields_and_allows_empty_description(store):
    release = publish(store, version="  1.2.0 ", description="")

    assert release.version == "1.2.0"
    assert release.description == ""


@pytest.mark.parametrize("version", ["", "   "])
def test_publish_requires_version_before_io(store, storage, version):
    with pytest.raises(ValidationError):
        publish(store, version=version)

    assert storage.list_keys() == []


def test_publish_removes_blob_when_metadata_commit_fails(tmp_path):
    storage = FailingMetadataStorage(tmp_path / "release")
    store = ReleaseStore(storage)

    with pytest.raises(StorageError):
        publish(store)

    assert storage.list_keys() == []


def test_publish_removes_partial_blob_on_reader_failure(store, storage):
    with pytest.raises(RuntimeError):
        store.publish(ReleaseDraft(version="1"), BrokenReader(RuntimeError("client went away")))

    assert storage.list_keys() == []


def test_publish_wraps_io_errors_from_reader(store, storage):
    with pytest.raises(StorageError):
        store.publish(ReleaseDraft(version="1"), BrokenReader(OSError("disk failure")))

    assert storage.list_keys() == []


def test_list_orders_by_creation_time_descending(store):
    first = publish(store, version="0.01")
    second = publish(store, version="0.02")
    third = publish(store, version="0.03")

    assert [release.id for release in store.list()] == [third.id, second.id, first.id]


def test_list_sort_is_stable_for_equal_timestamps(storage):
    now = datetime(2026, 2, 16, 1, 30, 0, tzinfo=timezone.utc)
    store = ReleaseStore(storage, id_generator=ReleaseIdGenerator(storage, clock=lambda: now))
    published = {publish(store, version=str(n)).id for n in range(3)}
    enumeration = [key[: -len(".json")] for key in storage.list_keys() if key.endswith(".json")]

    listed = [release.id for release in store.list()]

    assert set(listed) == published
    assert listed == enumeration


def test_list_skips_orphaned_blobs_and_foreign_files(store, storage):
    release = publish(store)
    storage.put(blob_key("20260216T000000+0000_000"), b"orphan")
    storage.put("notes.json", b"{}")

    assert [item.id for item in store.list()] == [release.id]


def test_list_is_empty_for_new_store(store):
    assert store.list() == []


def test_unpublish_removes_both_artifacts(store, storage):
    release = publish(store)

    store.unpublish(release.id)

    assert storage.list_keys() == []
    with pytest.raises(ReleaseNotFoundError):
        store.get(release.id)
    with pytest.raises(NotFoundError):
        store.stream(release.id, io.BytesIO())


def test_repeated_unpublish_is_not_found(store):
    release = publish(store)
    store.unpublish(release.id)

    with pytest.raises(ReleaseNotFoundError):
        store.unpublish(release.id)


def test_unpublish_tolerates_missing_blob(store, storage):
    release = publish(store)
    storage.delete(blob_key(release.id))

    store.unpublish(release.id)

    assert not storage.exists(meta_key(release.id))


def test_unpublish_tolerates_missing_metadata(store, storage):
    release = publish(store)
    storage.delete(meta_key(release.id))

    store.unpublish(release.id)

    assert not storage.exists(blob_key(release.id))


def test_stream_distinguishes_missing_blob(store, storage):
    release = publish(store)
    storage.delete(blob_key(release.id))

    with pytest.raises(ArtifactNotFoundError):
        store.stream(release.id, io.BytesIO())


def test_get_unknown_release_is_not_found(store):
    with pytest.raises(ReleaseNotFoundError):
        store.get("20260216T013000+0000_999")


def test_corrupt_metadata_is_a_storage_error(store, storage):
    release = publish(store)
    storage.put(meta_key(release.id), b"not json")

    with pytest.raises(StorageError):
        store.get(release.id)


@pytest.mark.parametrize(
    "release_id",
    [
        "",
        "abc",
        "20260216T013000+0000_0001",
        "../../../../../../../etc",
        "..%2F..%2F..%2F..%2Fpasswd",
        "20260216T013000+0000/000",
    ],
)
@pytest.mark.parametrize("operation", ["get", "stream", "unpublish"])
def test_invalid_ids_are_rejected_without_touching_storage(tmp_path, release_id, operation):
    storage = RecordingStorage(tmp_path / "release")
    store = ReleaseStore(storage)

    with pytest.raises(ValidationError):
        if operation == "stream":
            store.stream(release_id, io.BytesIO())
        else:
            getattr(store, operation)(release_id)

    assert storage.calls == []


def test_concurrent_publishes_get_distinct_ids(storage):
    now = datetime(2026, 2, 16, 1, 30, 0, tzinfo=timezone.utc)
    store = ReleaseStore(storage, id_generator=ReleaseIdGenerator(storage, clock=lambda: now))
    results = []
    errors = []

    def _publish(n):
        try:
            results.append(publish(store, version=f"1.{n}", payload=f"payload-{n}".encode()))
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_publish, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len({release.id for release in results}) == 8
    for release in results:
        sink = io.BytesIO()
        store.stream(release.id, sink)
        assert sink.getvalue() == f"payload-{release.version.split('.')[1]}".encode()


def test_render_file_name():
    release = Release(
        id="20260216T013000+0000_000",
        version="1.4.2",
        created_at=datetime(2026, 2, 16, 1, 30, 5, tzinfo=timezone.utc),
    )

    assert render_file_name(release, "app-{{ version }}-{{ date }}.zip") == "app-1.4.2-20260216013005.zip"
    assert render_file_name(release, 'x/"{{ version }}"') == "x_1.4.2"
