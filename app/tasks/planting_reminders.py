"""
ARQ planting reminder task.

send_planting_reminders: runs daily (PLANTING_REMINDER_HOUR:PLANTING_REMINDER_MINUTE UTC)
    For every user with a reminder toggle enabled (global or per-seed), emails
    one consolidated message listing the indoor-start, direct-sow and
    transplant dates that fall inside the user's lead-time window.

    De-duplicated via planting_reminder_logs: a (type, target date) pair is
    logged once its email goes out and is never sent again that year. Log
    rows are written only after a successful send, so a failed send is
    retried by the next run. A crash between send and log write causes one
    duplicate email on the next run; that window is accepted.
"""
import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.db.session import AsyncSessionLocal
from app.models.logs import PipelineRun
from app.models.seed import Seed
from app.models.user import User, UserSettings
from app.services.email import EmailNotConfiguredError, send_email
from app.services.frost_dates import resolve_first_frost_date, resolve_last_frost_date
from app.services.planting_schedule import aggregate_events, load_inventory, load_wishlist
from app.services.reminder_log import get_reminder_logs, record_reminders_sent
from app.services.reminders import (
    build_reminder_body,
    build_reminder_subject,
    enabled_reminder_types,
    filter_new,
    group_by_type,
    log_targets,
    match_window,
    resolve_lead_days,
    uses_per_item_toggles,
)

logger = logging.getLogger(__name__)

MailTransport = Callable[[str, str, str], Awaitable[None]]

SENT = "sent"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass
class ReminderRunResult:
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def record(self, outcome: str, error: Optional[str] = None) -> None:
        setattr(self, outcome, getattr(self, outcome) + 1)
        if error:
            self.errors.append(error)

    def as_dict(self) -> dict:
        return asdict(self)


def local_today(now: datetime) -> date:
    """Calendar date of ``now`` in the configured timezone (naive values are taken as local)."""
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(ZoneInfo(settings.TIMEZONE)).date()


# ── Entry points ──────────────────────────────────────────────────────────────


async def run_planting_reminders(
    now: Optional[datetime] = None,
    *,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    transport: Optional[MailTransport] = None,
    concurrency: Optional[int] = None,
) -> ReminderRunResult:
    """Process every reminder-enabled user once. Per-user errors never abort the run."""
    now = now or datetime.now(timezone.utc)
    today = local_today(now)
    factory = session_factory or AsyncSessionLocal
    send = transport or send_email
    limit = max(1, concurrency or settings.REMINDER_CONCURRENCY)

    async with factory() as db:
        user_ids = await find_reminder_user_ids(db)
    logger.info("run_planting_reminders: %d candidate users for %s", len(user_ids), today)

    result = ReminderRunResult()
    semaphore = asyncio.Semaphore(limit)

    async def _worker(user_id: int) -> None:
        async with semaphore:
            try:
                async with factory() as db:
                    outcome, error = await process_user(db, user_id, today, send)
            except Exception as exc:
                logger.exception("run_planting_reminders: failed for user %d: %s", user_id, exc)
                outcome, error = FAILED, f"User {user_id}: {exc}"
            result.record(outcome, error)

    await asyncio.gather(*(_worker(user_id) for user_id in user_ids))

    logger.info(
        "run_planting_reminders: complete, sent=%d failed=%d skipped=%d",
        result.sent, result.failed, result.skipped,
    )
    return result


async def send_planting_reminders(ctx: dict) -> dict:
    """ARQ job wrapper: records a PipelineRun around run_planting_reminders."""
    logger.info("send_planting_reminders: starting")
    factory = ctx.get("session_factory") or AsyncSessionLocal
    started_at = datetime.now(timezone.utc)

    async with factory() as db:
        pipeline = PipelineRun(
            pipeline_name="planting_reminders",
            status="running",
            started_at=started_at,
        )
        db.add(pipeline)
        await db.commit()
        await db.refresh(pipeline)

        try:
            result = await run_planting_reminders(
                ctx.get("now"),
                session_factory=factory,
                transport=ctx.get("mail_transport"),
            )

            finished_at = datetime.now(timezone.utc)
            pipeline.status = "success"
            pipeline.finished_at = finished_at
            pipeline.duration_ms = int((finished_at - started_at).total_seconds() * 1000)
            pipeline.records_processed = result.sent
            if result.errors:
                pipeline.error_message = "\n".join(result.errors)
            await db.commit()

        except Exception as exc:
            logger.exception("send_planting_reminders: unexpected error")
            finished_at = datetime.now(timezone.utc)
            pipeline.status = "failed"
            pipeline.finished_at = finished_at
            pipeline.duration_ms = int((finished_at - started_at).total_seconds() * 1000)
            pipeline.error_message = str(exc)
            await db.commit()
            raise

    return result.as_dict()


# ── Per-user pipeline ─────────────────────────────────────────────────────────


async def find_reminder_user_ids(db: AsyncSession) -> list[int]:
    """Active users with any global toggle on, or any non-archived seed with a toggle on."""
    global_enabled = or_(
        UserSettings.enable_indoor_start_reminders == True,
        UserSettings.enable_direct_sow_reminders == True,
        UserSettings.enable_transplant_reminders == True,
    )
    seed_enabled = exists().where(
        Seed.user_id == User.id,
        Seed.is_archived == False,
        or_(
            Seed.enable_indoor_start_reminder == True,
            Seed.enable_direct_sow_reminder == True,
            Seed.enable_transplant_reminder == True,
        ),
    )
    result = await db.execute(
        select(User.id)
        .outerjoin(UserSettings, UserSettings.user_id == User.id)
        .where(User.is_active == True, or_(global_enabled, seed_enabled))
        .order_by(User.id)
    )
    return list(result.scalars().all())


async def process_user(
    db: AsyncSession,
    user_id: int,
    today: date,
    transport: MailTransport,
) -> tuple[str, Optional[str]]:
    """resolve → aggregate → window → dedupe → send → log, for one user."""
    result = await db.execute(
        select(User).options(selectinload(User.settings)).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()
    if user is None or not user.email:
        return SKIPPED, None

    profile = user.settings
    year = today.year
    last_frost = resolve_last_frost_date(profile, year)
    if last_frost is None:
        logger.info("process_user: no frost date for user %d, skipping", user_id)
        return SKIPPED, None

    per_item = uses_per_item_toggles(profile)
    seeds = await load_inventory(db, user_id, with_reminders_only=per_item)
    wishlist = [] if per_item else await load_wishlist(db, user_id)

    events = aggregate_events(
        last_frost,
        seeds=seeds,
        wishlist_items=wishlist,
        stages_for=lambda item: enabled_reminder_types(profile, item),
    )
    due = match_window(events, today, resolve_lead_days(profile))
    candidates = filter_new(due, await get_reminder_logs(db, user_id, year))
    if not candidates:
        logger.info("process_user: nothing due for user %d, skipping", user_id)
        return SKIPPED, None

    buckets = group_by_type(candidates)
    subject = build_reminder_subject(len(candidates))
    body = build_reminder_body(
        user.first_name, buckets, last_frost, resolve_first_frost_date(profile, year)
    )

    try:
        await transport(user.email, subject, body)
    except EmailNotConfiguredError as exc:
        logger.error("process_user: %s, not sending to user %d", exc, user_id)
        return SKIPPED, str(exc)
    except Exception as exc:
        logger.error("process_user: send failed for user %d: %s", user_id, exc)
        return FAILED, f"Failed to send to {user.email}: {exc}"

    try:
        await record_reminders_sent(db, user_id, year, log_targets(buckets))
    except Exception as exc:
        logger.exception(
            "process_user: reminder sent to user %d but log write failed; "
            "the next run will send it again", user_id,
        )
        return SENT, f"Sent to {user.email} but failed to record: {exc}"

    logger.info("process_user: sent %d reminders to user %d", len(candidates), user_id)
    return SENT, None
