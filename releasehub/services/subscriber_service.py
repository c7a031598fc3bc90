from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from releasehub.core.unit_of_work import unit_of_work
from releasehub.exceptions.exceptions import ConflictError, SubscriberNotFoundError, ValidationError
from releasehub.models.subscriber import Subscriber


@dataclass(frozen=True)
class SubscriberItem:
    id: str
    name: str
    email: str
    created_at: datetime


def _to_item(row: Subscriber) -> SubscriberItem:
    return SubscriberItem(id=row.id, name=row.name, email=row.email, created_at=row.created_at)


def _normalize(name: str, email: str) -> tuple[str, str]:
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name:
        raise ValidationError("Subscriber name is required")
    if not email or "@" not in email:
        raise ValidationError("A valid subscriber email is required")
    return name, email


class SubscriberService:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_subscribers(self) -> list[SubscriberItem]:
        with unit_of_work(self.session_factory) as uow:
            return [_to_item(row) for row in uow.subscriber_repo.list_subscribers()]

    def get_subscriber(self, subscriber_id: str) -> SubscriberItem:
        with unit_of_work(self.session_factory) as uow:
            row = uow.subscriber_repo.get_by_id(subscriber_id)
            if not row:
                raise SubscriberNotFoundError("Subscriber not found")
            return _to_item(row)

    def subscribe(self, *, name: str, email: str) -> SubscriberItem:
        name, email = _normalize(name, email)
        try:
            with unit_of_work(self.session_factory) as uow:
                repo = uow.subscriber_repo
                if repo.get_by_email(email):
                    raise ConflictError("Subscriber email already exists")
                row = repo.add(
                    Subscriber(
                        id=uuid.uuid4().hex,
                        name=name,
                        email=email,
                        created_at=datetime.now(timezone.utc),
                    )
                )
                return _to_item(row)
        except IntegrityError as exc:
            raise ConflictError("Subscriber email already exists") from exc

    def update_subscriber(self, subscriber_id: str, *, name: str, email: str) -> SubscriberItem:
        name, email = _normalize(name, email)
        try:
            with unit_of_work(self.session_factory) as uow:
                repo = uow.subscriber_repo
                row = repo.get_by_id(subscriber_id)
                if not row:
                    raise SubscriberNotFoundError("Subscriber not found")
                existing = repo.get_by_email(email)
                if existing and existing.id != row.id:
                    raise ConflictError("Subscriber email already exists")
                row.name = name
                row.email = email
                uow.session.flush()
                return _to_item(row)
        except IntegrityError as exc:
            raise ConflictError("Subscriber email already exists") from exc

    def delete_subscriber(self, subscriber_id: str) -> None:
        with unit_of_work(self.session_factory) as uow:
            row = uow.subscriber_repo.get_by_id(subscriber_id)
            if not row:
                raise SubscriberNotFoundError("Subscriber not found")
            uow.subscriber_repo.delete(row)
