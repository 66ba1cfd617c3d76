"""
Planting reminder log store.

Rows are written only after a successful send and never updated. Inserts are
insert-if-absent on (user_id, reminder_type, target_date, year): a row that a
concurrent run already wrote is silently skipped, not an error.
"""
import logging
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.logs import PlantingReminderLog

logger = logging.getLogger(__name__)

_CONFLICT_COLUMNS = ["user_id", "reminder_type", "target_date", "year"]


async def get_reminder_logs(db: AsyncSession, user_id: int, year: int) -> list[PlantingReminderLog]:
    result = await db.execute(
        select(PlantingReminderLog).where(
            PlantingReminderLog.user_id == user_id,
            PlantingReminderLog.year == year,
        )
    )
    return list(result.scalars().all())


async def record_reminders_sent(
    db: AsyncSession,
    user_id: int,
    year: int,
    targets: dict[tuple[str, date], list[str]],
) -> int:
    """Insert one log row per (type, date) target. Returns the number of new rows."""
    if not targets:
        return 0

    now = datetime.now(timezone.utc)
    rows = [
        {
            "user_id": user_id,
            "reminder_type": reminder_type,
            "target_date": target_date,
            "year": year,
            "plant_names": names,
            "created_at": now,
        }
        for (reminder_type, target_date), names in targets.items()
    ]

    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(PlantingReminderLog).values(rows).on_conflict_do_nothing(
            index_elements=_CONFLICT_COLUMNS
        )
    elif dialect == "sqlite":
        stmt = sqlite_insert(PlantingReminderLog).values(rows).on_conflict_do_nothing(
            index_elements=_CONFLICT_COLUMNS
        )
    else:
        return await _insert_each(db, rows)

    result = await db.execute(stmt)
    await db.commit()
    inserted = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(rows)
    if inserted < len(rows):
        logger.info(
            "record_reminders_sent: %d of %d rows for user %d already logged by another run",
            len(rows) - inserted, len(rows), user_id,
        )
    return inserted


async def _insert_each(db: AsyncSession, rows: list[dict]) -> int:
    inserted = 0
    for row in rows:
        try:
            async with db.begin_nested():
                db.add(PlantingReminderLog(**row))
            inserted += 1
        except IntegrityError:
            logger.info(
                "record_reminders_sent: %s %s for user %d already logged",
                row["reminder_type"], row["target_date"], row["user_id"],
            )
    await db.commit()
    return inserted
