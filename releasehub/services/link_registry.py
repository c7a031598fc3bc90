from __future__ import annotations

import logging
import secrets
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable

from sqlalchemy.orm import sessionmaker

from releasehub.core.unit_of_work import unit_of_work
from releasehub.domain.release import Link
from releasehub.exceptions.exceptions import LinkNotFoundError
from releasehub.models.link import LinkRow

logger = logging.getLogger(__name__)

LINK_TOKEN_BYTES = 32

LinkPredicate = Callable[[str, str], bool]


def new_link_token() -> str:
    return secrets.token_urlsafe(LINK_TOKEN_BYTES)


def _to_link(row: LinkRow) -> Link:
    created_at = row.created_at
    if created_at.tzinfo is None:
        # SQLite drops the offset; values are always written in UTC
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Link(
        id=row.id,
        subscriber_id=row.subscriber_id,
        release_id=row.release_id,
        created_at=created_at,
    )


class LinkRegistry:
    """Maps unguessable link tokens to (subscriber, release) pairs."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self._lock = threading.Lock()

    def create_links(self, subscriber_ids: Iterable[str], release_id: str) -> list[Link]:
        subscriber_ids = list(subscriber_ids)
        if not subscriber_ids:
            return []
        now = datetime.now(timezone.utc)
        links = [
            Link(id=new_link_token(), subscriber_id=subscriber_id, release_id=release_id, created_at=now)
            for subscriber_id in subscriber_ids
        ]
        with self._lock:
            with unit_of_work(self.session_factory) as uow:
                uow.link_repo.add_all(
                    [
                        LinkRow(
                            id=link.id,
                            subscriber_id=link.subscriber_id,
                            release_id=link.release_id,
                            created_at=link.created_at,
                        )
                        for link in links
                    ]
                )
        logger.info("[link_create] release_id=%s count=%s", release_id, len(links))
        return links

    def get(self, link_id: str) -> Link:
        if not link_id:
            raise LinkNotFoundError("Link was not found")
        with unit_of_work(self.session_factory) as uow:
            row = uow.link_repo.get_by_id(link_id)
            if row is None:
                raise LinkNotFoundError("Link was not found")
            return _to_link(row)

    def remove_where(self, predicate: LinkPredicate) -> int:
        removed = 0
        with self._lock:
            with unit_of_work(self.session_factory) as uow:
                repo = uow.link_repo
                for row in repo.list_all():
                    if predicate(row.subscriber_id, row.release_id):
                        repo.delete(row)
                        removed += 1
        return removed

    def remove_subscriber_links(self, subscriber_id: str) -> int:
        removed = self.remove_where(lambda sub_id, _release_id: sub_id == subscriber_id)
        logger.info("[link_remove] subscriber_id=%s count=%s", subscriber_id, removed)
        return removed

    def remove_release_links(self, release_id: str) -> int:
        removed = self.remove_where(lambda _sub_id, rel_id: rel_id == release_id)
        logger.info("[link_remove] release_id=%s count=%s", release_id, removed)
        return removed
