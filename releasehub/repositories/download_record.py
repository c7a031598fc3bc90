from __future__ import annotations

from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from releasehub.models.download_record import DownloadRecord


class DownloadRecordRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, *, subscriber_id: str, release_id: str) -> Optional[DownloadRecord]:
        stmt = select(DownloadRecord).where(
            and_(DownloadRecord.subscriber_id == subscriber_id, DownloadRecord.release_id == release_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def increment(self, *, subscriber_id: str, release_id: str) -> int:
        record = self.get(subscriber_id=subscriber_id, release_id=release_id)
        if record is None:
            record = DownloadRecord(subscriber_id=subscriber_id, release_id=release_id, count=0)
            self.db.add(record)
        record.count += 1
        self.db.flush()
        return record.count

    def list_for_subscriber(self, subscriber_id: str) -> list[DownloadRecord]:
        stmt = select(DownloadRecord).where(DownloadRecord.subscriber_id == subscriber_id)
        return self.db.execute(stmt).scalars().all()
