import asyncio
import logging
import random
from fastapi import BackgroundTasks

from releasehub.core.config import AppSettings, MailConfig, build_mail_config
from releasehub.services.email_service.email_service import send_release_email
from releasehub.services.notifier import ReleaseNotification


def queue_release_notifications(
    background_tasks: BackgroundTasks,
    notifications: list[ReleaseNotification],
    app_settings: AppSettings,
) -> None:
    if not notifications:
        return
    background_tasks.add_task(
        deliver_notifications,
        notifications,
        build_mail_config(app_settings),
        app_settings.EMAIL_RETRY_MAX_ATTEMPTS,
        app_settings.EMAIL_RETRY_BASE_DELAY_SECONDS,
        app_settings.EMAIL_RETRY_MAX_DELAY_SECONDS,
    )


async def deliver_notifications(
    notifications: list[ReleaseNotification],
    mail_config: MailConfig,
    max_attempts: int = 4,
    base_delay_seconds: int = 2,
    max_delay_seconds: int = 30,
) -> int:
    delivered = 0
    for notification in notifications:
        if await _send_with_retries(
            notification,
            mail_config,
            max_attempts=max_attempts,
            base_delay_seconds=base_delay_seconds,
            max_delay_seconds=max_delay_seconds,
        ):
            delivered += 1
    logging.info("[release_notify] delivered %s of %s notification(s)", delivered, len(notifications))
    return delivered


async def _send_with_retries(
    notification: ReleaseNotification,
    mail_config: MailConfig,
    *,
    max_attempts: int,
    base_delay_seconds: int,
    max_delay_seconds: int,
) -> bool:
    for attempt in range(1, max_attempts + 1):
        try:
            await send_release_email(
                mail_config,
                email=notification.email,
                subject=notification.subject,
                body=notification.body,
            )
            return True
        except Exception as exc:
            if attempt >= max_attempts:
                logging.error(
                    "[-] Failed to send release notification to %s after %s attempts: %s",
                    notification.email,
                    attempt,
                    exc,
                )
                return False

            # Exponential backoff with full jitter
            cap = min(max_delay_seconds, base_delay_seconds * (2 ** (attempt - 1)))
            delay = random.uniform(0, cap)
            logging.warning(
                "[!] Notification attempt %s failed for %s. Retrying in %.1f seconds.",
                attempt,
                notification.email,
                delay,
            )
            await asyncio.sleep(delay)
    return False
