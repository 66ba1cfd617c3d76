from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    settings: Mapped[Optional["UserSettings"]] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    seeds: Mapped[list["Seed"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    wishlist_items: Mapped[list["WishlistItem"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    planting_reminder_logs: Mapped[list["PlantingReminderLog"]] = relationship(back_populates="user")


class UserSettings(Base):
    """A user's growing profile: frost anchors, zone, and reminder preferences."""

    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True
    )

    # Location / frost
    hardiness_zone: Mapped[Optional[str]] = mapped_column(String(10))
    last_frost_date: Mapped[Optional[date]] = mapped_column(Date)
    first_frost_date: Mapped[Optional[date]] = mapped_column(Date)

    # Global reminder toggles
    enable_indoor_start_reminders: Mapped[bool] = mapped_column(Boolean, default=False)
    enable_direct_sow_reminders: Mapped[bool] = mapped_column(Boolean, default=False)
    enable_transplant_reminders: Mapped[bool] = mapped_column(Boolean, default=False)
    reminder_lead_days: Mapped[Optional[int]] = mapped_column(Integer)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship(back_populates="settings")
