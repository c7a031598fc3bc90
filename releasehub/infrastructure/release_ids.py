from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable

from releasehub.core.config import MAX_RELEASE_ID_ATTEMPTS
from releasehub.exceptions.exceptions import IdentifierExhaustedError, StorageError
from releasehub.infrastructure.storage.base import ArtifactStorage

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%z"
SUFFIX_WIDTH = 3
# 20260216T013000+0000_000
RELEASE_ID_LENGTH = 20 + 1 + SUFFIX_WIDTH
RELEASE_ID_PATTERN = re.compile(r"^\d{8}T\d{6}[+-]\d{4}_\d{3}$")

BLOB_SUFFIX = ".dat"
META_SUFFIX = ".json"


def blob_key(release_id: str) -> str:
    return f"{release_id}{BLOB_SUFFIX}"


def meta_key(release_id: str) -> str:
    return f"{release_id}{META_SUFFIX}"


def is_well_formed(release_id: str) -> bool:
    return (
        bool(release_id)
        and len(release_id) == RELEASE_ID_LENGTH
        and RELEASE_ID_PATTERN.match(release_id) is not None
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReleaseIdGenerator:
    """
    Time-ordered release identifiers.

    The stamp is UTC to full seconds. Releases created within the same second
    get increasing suffixes, so ids always sort in creation order.
    """

    def __init__(
        self,
        storage: ArtifactStorage,
        *,
        clock: Callable[[], datetime] = utc_now,
        max_attempts: int = MAX_RELEASE_ID_ATTEMPTS,
    ):
        if not 1 <= max_attempts <= MAX_RELEASE_ID_ATTEMPTS:
            raise ValueError(f"max_attempts must be between 1 and {MAX_RELEASE_ID_ATTEMPTS}")
        self.storage = storage
        self.clock = clock
        self.max_attempts = max_attempts

    def _is_taken(self, release_id: str) -> bool:
        try:
            return self.storage.exists(blob_key(release_id)) or self.storage.exists(meta_key(release_id))
        except OSError as exc:
            raise StorageError(f"Cannot inspect release storage: {exc}") from exc

    def new_release_id(self, now: datetime | None = None) -> str:
        stamp = (now or self.clock()).astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
        for attempt in range(self.max_attempts):
            candidate = f"{stamp}_{attempt:0{SUFFIX_WIDTH}d}"
            if not self._is_taken(candidate):
                return candidate
        raise IdentifierExhaustedError(
            f"No free release id for {stamp} after {self.max_attempts} attempts"
        )
