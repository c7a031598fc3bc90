from __future__ import annotations

import logging
import time

from sqlalchemy.orm import sessionmaker

from releasehub.core.locks import ReadWriteLock
from releasehub.core.unit_of_work import unit_of_work
from releasehub.services.link_registry import LinkRegistry
from releasehub.services.release_store import ReleaseStore, Sink

logger = logging.getLogger(__name__)


class DownloadTracker:
    """
    Per (subscriber, release) download counters.

    Counting is at-least-once: the counter is persisted before any bytes
    are streamed and is not rolled back if streaming fails afterwards.
    """

    def __init__(self, session_factory: sessionmaker, registry: LinkRegistry, store: ReleaseStore):
        self.session_factory = session_factory
        self.registry = registry
        self.store = store
        self._lock = ReadWriteLock()

    def _increment(self, subscriber_id: str, release_id: str) -> int:
        with self._lock.write_locked():
            with unit_of_work(self.session_factory) as uow:
                return uow.download_repo.increment(subscriber_id=subscriber_id, release_id=release_id)

    def record_download(self, link_id: str, sink: Sink) -> int:
        started = time.perf_counter()
        link = self.registry.get(link_id)
        count = self._increment(link.subscriber_id, link.release_id)
        # blob copy happens outside the counter lock
        written = self.store.stream(link.release_id, sink)
        logger.info(
            "[release_download] subscriber_id=%s release_id=%s count=%s bytes=%s elapsed_ms=%s",
            link.subscriber_id,
            link.release_id,
            count,
            written,
            int((time.perf_counter() - started) * 1000),
        )
        return written

    def stats_for_subscriber(self, subscriber_id: str) -> dict[str, int]:
        with self._lock.read_locked():
            with unit_of_work(self.session_factory) as uow:
                records = uow.download_repo.list_for_subscriber(subscriber_id)
                return {record.release_id: int(record.count) for record in records}
