from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from app.core.config import settings
from app.db.session import get_db, get_session_factory
from app.services.email import send_email
from app.tasks.planting_reminders import MailTransport

__all__ = ["get_db", "get_session_factory", "get_mail_transport", "require_cron_secret", "CronCaller"]


def get_mail_transport() -> MailTransport:
    return send_email


async def require_cron_secret(
    authorization: Annotated[Optional[str], Header()] = None,
) -> None:
    if not settings.CRON_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error",
        )
    if authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


CronCaller = Annotated[None, Depends(require_cron_secret)]
