from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON, Date, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class PlantingReminderLog(Base):
    """Append-only record of a delivered planting reminder.

    One row per (user, reminder type, target date) within a year. The unique
    constraint is what makes repeated batch runs idempotent.
    """

    __tablename__ = "planting_reminder_logs"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "reminder_type", "target_date", "year",
            name="uq_planting_reminder_logs_user_type_date_year",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    reminder_type: Mapped[str] = mapped_column(
        Enum("indoor_start", "direct_sow", "transplant", name="planting_reminder_type_enum")
    )
    target_date: Mapped[date] = mapped_column(Date)
    year: Mapped[int] = mapped_column(Integer, index=True)
    plant_names: Mapped[Optional[list[str]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    user: Mapped["User"] = relationship(back_populates="planting_reminder_logs")


class PipelineRun(Base):
    __tablename__ = "pipeline_runs"

    id: Mapped[int] = mapped_column(primary_key=True)
    pipeline_name: Mapped[str] = mapped_column(String(100), index=True)
    status: Mapped[str] = mapped_column(
        Enum("running", "success", "failed", "skipped", name="pipeline_status_enum")
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    duration_ms: Mapped[Optional[int]] = mapped_column(Integer)
    records_processed: Mapped[Optional[int]] = mapped_column(Integer)
    error_message: Mapped[Optional[str]] = mapped_column(Text)
