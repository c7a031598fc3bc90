from __future__ import annotations

from sqlalchemy import BigInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from releasehub.database.db_setup import Base


class DownloadRecord(Base):
    __tablename__ = "download_records"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "release_id", name="uq_download_records_subscriber_release"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True, index=True)
    subscriber_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    release_id: Mapped[str] = mapped_column(String(32), nullable=False)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
