from __future__ import annotations

from typing import Any

from sqlalchemy.orm import sessionmaker

from releasehub.core.unit_of_work import unit_of_work
from releasehub.exceptions.exceptions import ValidationError


class ConfigService:
    """Free-form runtime values editable by the administrator."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_all(self) -> dict[str, Any]:
        with unit_of_work(self.session_factory) as uow:
            return {entry.key: entry.value for entry in uow.config_repo.list_all()}

    def update(self, values: dict[str, Any]) -> dict[str, Any]:
        if any(not (key or "").strip() for key in values):
            raise ValidationError("Config keys must not be empty")
        with unit_of_work(self.session_factory) as uow:
            for key, value in values.items():
                uow.config_repo.upsert(key.strip(), value)
        return self.get_all()
