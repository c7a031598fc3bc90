from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from releasehub.models.link import LinkRow


class LinkRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_all(self, rows: list[LinkRow]) -> list[LinkRow]:
        self.db.add_all(rows)
        self.db.flush()
        return rows

    def get_by_id(self, link_id: str) -> Optional[LinkRow]:
        return self.db.get(LinkRow, link_id)

    def list_all(self) -> list[LinkRow]:
        return self.db.execute(select(LinkRow)).scalars().all()

    def delete(self, row: LinkRow) -> None:
        self.db.delete(row)
