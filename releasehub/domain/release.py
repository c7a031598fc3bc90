from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from releasehub.exceptions.exceptions import ValidationError


@dataclass(frozen=True)
class ReleaseDraft:
    version: str
    description: str = ""

    def validate(self) -> None:
        if not (self.version or "").strip():
            raise ValidationError("Release version is required")


class Release(BaseModel):
    """Metadata record stored next to each release blob."""

    id: str
    version: str
    description: str = ""
    created_at: datetime
    size_bytes: int = 0
    checksum_sha256: str = ""

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class Link:
    id: str
    subscriber_id: str
    release_id: str
    created_at: datetime
