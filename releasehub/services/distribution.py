from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.orm import sessionmaker

from releasehub.core.config import AppSettings
from releasehub.infrastructure.release_ids import ReleaseIdGenerator
from releasehub.infrastructure.storage.local_fs import LocalFileSystemStorage
from releasehub.services.config_service import ConfigService
from releasehub.services.download_tracker import DownloadTracker
from releasehub.services.link_registry import LinkRegistry
from releasehub.services.notifier import ReleaseNotifier
from releasehub.services.release_store import ReleaseStore
from releasehub.services.subscriber_service import SubscriberService

logger = logging.getLogger(__name__)


@dataclass
class Distribution:
    """One store, registry and tracker shared by every request of an app."""

    store: ReleaseStore
    registry: LinkRegistry
    tracker: DownloadTracker
    subscribers: SubscriberService
    notifier: ReleaseNotifier
    config: ConfigService

    def unpublish_release(self, release_id: str) -> int:
        self.store.unpublish(release_id)
        return self.registry.remove_release_links(release_id)

    def unsubscribe(self, subscriber_id: str) -> int:
        # download counters of the subscriber are kept
        self.subscribers.delete_subscriber(subscriber_id)
        return self.registry.remove_subscriber_links(subscriber_id)


def build_distribution(app_settings: AppSettings, session_factory: sessionmaker) -> Distribution:
    storage = LocalFileSystemStorage(Path(app_settings.RELEASE_ROOT))
    store = ReleaseStore(
        storage,
        id_generator=ReleaseIdGenerator(storage, max_attempts=app_settings.RELEASE_ID_MAX_ATTEMPTS),
        chunk_size=app_settings.DOWNLOAD_CHUNK_SIZE_BYTES,
    )
    registry = LinkRegistry(session_factory)
    subscribers = SubscriberService(session_factory)
    logger.info("release root: %s", storage.root)
    return Distribution(
        store=store,
        registry=registry,
        tracker=DownloadTracker(session_factory, registry, store),
        subscribers=subscribers,
        notifier=ReleaseNotifier(
            registry,
            subscribers,
            make_link=app_settings.make_link,
            subject_template=app_settings.NOTIFY_EMAIL_SUBJECT_TEMPLATE,
        ),
        config=ConfigService(session_factory),
    )
