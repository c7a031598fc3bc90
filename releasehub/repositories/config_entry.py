from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from releasehub.models.config_entry import ConfigEntry


class ConfigEntryRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> list[ConfigEntry]:
        return self.db.execute(select(ConfigEntry).order_by(ConfigEntry.key)).scalars().all()

    def upsert(self, key: str, value: Any) -> ConfigEntry:
        entry = self.db.get(ConfigEntry, key)
        if entry is None:
            entry = ConfigEntry(key=key, value=value)
            self.db.add(entry)
        else:
            entry.value = value
        return entry
