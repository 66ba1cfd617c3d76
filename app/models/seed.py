from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Seed(Base):
    """A seed packet in a user's inventory."""

    __tablename__ = "seeds"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    plant_guide_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("plant_guides.id", ondelete="SET NULL"), index=True
    )

    custom_plant_name: Mapped[Optional[str]] = mapped_column(String(200))
    nickname: Mapped[Optional[str]] = mapped_column(String(200))
    variety: Mapped[Optional[str]] = mapped_column(String(200))
    custom_category: Mapped[Optional[str]] = mapped_column(String(50))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Custom offsets, only used when no encyclopedia guide is linked
    indoor_start_weeks: Mapped[Optional[int]] = mapped_column(Integer)
    outdoor_start_weeks: Mapped[Optional[int]] = mapped_column(Integer)
    transplant_weeks: Mapped[Optional[int]] = mapped_column(Integer)
    harvest_weeks: Mapped[Optional[int]] = mapped_column(Integer)

    # Per-seed reminder toggles, only honoured when every global toggle is off
    enable_indoor_start_reminder: Mapped[bool] = mapped_column(Boolean, default=False)
    enable_direct_sow_reminder: Mapped[bool] = mapped_column(Boolean, default=False)
    enable_transplant_reminder: Mapped[bool] = mapped_column(Boolean, default=False)

    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="seeds")
    plant_guide: Mapped[Optional["PlantGuide"]] = relationship(back_populates="seeds")


class WishlistItem(Base):
    __tablename__ = "wishlist_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    plant_guide_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("plant_guides.id", ondelete="SET NULL"), index=True
    )

    custom_plant_name: Mapped[Optional[str]] = mapped_column(String(200))
    variety: Mapped[Optional[str]] = mapped_column(String(200))
    custom_category: Mapped[Optional[str]] = mapped_column(String(50))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    indoor_start_weeks: Mapped[Optional[int]] = mapped_column(Integer)
    outdoor_start_weeks: Mapped[Optional[int]] = mapped_column(Integer)
    transplant_weeks: Mapped[Optional[int]] = mapped_column(Integer)
    harvest_weeks: Mapped[Optional[int]] = mapped_column(Integer)

    purchased: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="wishlist_items")
    plant_guide: Mapped[Optional["PlantGuide"]] = relationship(back_populates="wishlist_items")
