from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from jinja2 import Environment

from releasehub.domain.release import Release
from releasehub.services.email_service.email_service import render_release_email
from releasehub.services.link_registry import LinkRegistry
from releasehub.services.release_store import FILENAME_DATE_FORMAT
from releasehub.services.subscriber_service import SubscriberService

logger = logging.getLogger(__name__)

_subject_env = Environment(autoescape=False)


@dataclass(frozen=True)
class ReleaseNotification:
    subscriber_id: str
    email: str
    link: str
    subject: str
    body: str


class ReleaseNotifier:
    """Mints one download link per subscriber and renders the announcement."""

    def __init__(
        self,
        registry: LinkRegistry,
        subscribers: SubscriberService,
        make_link: Callable[[str], str],
        subject_template: str,
    ):
        self.registry = registry
        self.subscribers = subscribers
        self.make_link = make_link
        self.subject_template = _subject_env.from_string(subject_template)

    def prepare(self, release: Release) -> list[ReleaseNotification]:
        subscribers = self.subscribers.list_subscribers()
        by_id = {subscriber.id: subscriber for subscriber in subscribers}
        links = self.registry.create_links([subscriber.id for subscriber in subscribers], release.id)

        date = release.created_at.strftime(FILENAME_DATE_FORMAT)
        subject = self.subject_template.render(release=release, date=date).strip()
        notifications = []
        for link in links:
            subscriber = by_id[link.subscriber_id]
            url = self.make_link(link.id)
            notifications.append(
                ReleaseNotification(
                    subscriber_id=subscriber.id,
                    email=subscriber.email,
                    link=url,
                    subject=subject,
                    body=render_release_email(release=release, link=url, date=date, name=subscriber.name),
                )
            )
        logger.info("[release_notify] release_id=%s prepared=%s", release.id, len(notifications))
        return notifications
