from datetime import datetime, timedelta, timezone

import pytest

from releasehub.exceptions.exceptions import IdentifierExhaustedError, StorageError
from releasehub.infrastructure.release_ids import (
    RELEASE_ID_LENGTH,
    ReleaseIdGenerator,
    blob_key,
    is_well_formed,
    meta_key,
)

NOW = datetime(2026, 2, 16, 1, 30, 0, tzinfo=timezone.utc)


def test_new_release_id_is_utc_stamp_with_suffix(storage):
    generator = ReleaseIdGenerator(storage, clock=lambda: NOW)

    release_id = generator.new_release_id()

    assert release_id == "20260216T013000+0000_000"
    assert len(release_id) == RELEASE_ID_LENGTH
    assert is_well_formed(release_id)


def test_new_release_id_converts_offsets_to_utc(storage):
    local = NOW.astimezone(timezone(timedelta(hours=8)))
    generator = ReleaseIdGenerator(storage)

    assert generator.new_release_id(local) == "20260216T013000+0000_000"


def test_collision_in_same_second_increments_suffix(storage):
    generator = ReleaseIdGenerator(storage, clock=lambda: NOW)
    storage.put(blob_key("20260216T013000+0000_000"), b"orphan")
    storage.put(meta_key("20260216T013000+0000_001"), b"{}")

    assert generator.new_release_id() == "20260216T013000+0000_002"


def test_ids_sort_in_creation_order(storage):
    generator = ReleaseIdGenerator(storage)
    stamps = [NOW, NOW + timedelta(seconds=1), NOW + timedelta(minutes=3), NOW + timedelta(days=40)]

    ids = [generator.new_release_id(stamp) for stamp in stamps]

    assert ids == sorted(ids)


def test_generation_is_bounded(storage):
    generator = ReleaseIdGenerator(storage, clock=lambda: NOW, max_attempts=2)
    storage.put(blob_key("20260216T013000+0000_000"), b"x")
    storage.put(blob_key("20260216T013000+0000_001"), b"x")

    with pytest.raises(IdentifierExhaustedError):
        generator.new_release_id()


@pytest.mark.parametrize("attempts", [0, 1001])
def test_max_attempts_must_fit_suffix_width(storage, attempts):
    with pytest.raises(ValueError):
        ReleaseIdGenerator(storage, max_attempts=attempts)


def test_storage_errors_abort_generation(storage, monkeypatch):
    def _denied(key):
        raise PermissionError("permission denied")

    monkeypatch.setattr(storage, "exists", _denied)
    generator = ReleaseIdGenerator(storage, clock=lambda: NOW)

    with pytest.raises(StorageError):
        generator.new_release_id()


@pytest.mark.parametrize(
    "candidate",
    [
        "",
        "20260216T013000+0000",
        "20260216T013000+0000_0000",
        "20260216T013000Z0000_000",
        "../../../../../../../etc",
    ],
)
def test_is_well_formed_rejects_other_shapes(candidate):
    assert not is_well_formed(candidate)
