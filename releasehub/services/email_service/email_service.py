import logging
from email.message import EmailMessage
from pathlib import Path

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape

from releasehub.core.config import MailConfig


TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=select_autoescape(["html"]))
release_template = env.get_template("release_notification.html")


def render_release_email(*, release, link: str, date: str, name: str) -> str:
    return release_template.render(release=release, link=link, date=date, name=name)


async def _send_html_email(
    mail_config: MailConfig,
    *,
    subject: str,
    recipients: list[str],
    body: str,
) -> None:
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = mail_config.MAIL_FROM
    message["To"] = ", ".join(recipients)
    message.set_content(body, subtype="html")

    await aiosmtplib.send(
        message,
        hostname=mail_config.MAIL_SERVER,
        port=mail_config.MAIL_PORT,
        start_tls=mail_config.MAIL_STARTTLS and not mail_config.MAIL_SSL_TLS,
        use_tls=mail_config.MAIL_SSL_TLS,
        username=mail_config.MAIL_USERNAME if mail_config.USE_CREDENTIALS else None,
        password=mail_config.MAIL_PASSWORD if mail_config.USE_CREDENTIALS else None,
        validate_certs=mail_config.VALIDATE_CERTS,
        recipients=recipients,
    )


async def send_release_email(mail_config: MailConfig, *, email: str, subject: str, body: str) -> None:
    await _send_html_email(mail_config, subject=subject, recipients=[email], body=body)
    logging.info("release notification sent to %s", email)
