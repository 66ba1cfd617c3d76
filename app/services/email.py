"""
Async email sender using aiosmtplib with STARTTLS.

Reads EMAIL_HOST, EMAIL_PORT, EMAIL_USERNAME, EMAIL_PASSWORD and EMAIL_FROM
from Settings. Unlike fire-and-forget notifications, planting reminders need
to know whether delivery worked, so failures propagate to the caller.
"""
import logging
from email.mime.text import MIMEText

import aiosmtplib

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(RuntimeError):
    """EMAIL_HOST is not set; nothing can be sent."""


async def send_email(to: str, subject: str, body: str) -> None:
    if not settings.EMAIL_HOST:
        raise EmailNotConfiguredError("Email service not configured")

    msg = MIMEText(body, "plain", "utf-8")
    msg["Subject"] = subject
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to

    await aiosmtplib.send(
        msg,
        hostname=settings.EMAIL_HOST,
        port=settings.EMAIL_PORT,
        username=settings.EMAIL_USERNAME or None,
        password=settings.EMAIL_PASSWORD or None,
        start_tls=True,
    )
    logger.info("email: sent '%s' to %s", subject, to)
