import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.deps import CronCaller, get_mail_transport, get_session_factory
from app.schemas.reminder import ReminderRunRead, ReminderRunResults
from app.tasks.planting_reminders import MailTransport, run_planting_reminders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


@router.post("/planting-reminders", response_model=ReminderRunRead)
async def trigger_planting_reminders(
    _: CronCaller,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    transport: MailTransport = Depends(get_mail_transport),
):
    """Run the planting reminder batch now. Intended for an external scheduler."""
    try:
        result = await run_planting_reminders(session_factory=session_factory, transport=transport)
    except Exception:
        logger.exception("trigger_planting_reminders: batch failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process planting reminders",
        )
    return ReminderRunRead(
        message="Processed planting reminders",
        results=ReminderRunResults(**result.as_dict()),
    )
