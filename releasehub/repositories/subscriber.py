from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from releasehub.models.subscriber import Subscriber


class SubscriberRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, subscriber: Subscriber) -> Subscriber:
        self.db.add(subscriber)
        self.db.flush()
        self.db.refresh(subscriber)
        return subscriber

    def get_by_id(self, subscriber_id: str) -> Optional[Subscriber]:
        return self.db.get(Subscriber, subscriber_id)

    def get_by_email(self, email: str) -> Optional[Subscriber]:
        stmt = select(Subscriber).where(Subscriber.email == email)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_subscribers(self) -> list[Subscriber]:
        stmt = select(Subscriber).order_by(Subscriber.created_at.asc(), Subscriber.id.asc())
        return self.db.execute(stmt).scalars().all()

    def delete(self, subscriber: Subscriber) -> None:
        self.db.delete(subscriber)
