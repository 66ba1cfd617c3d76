from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class PlantGuide(Base):
    """Shared encyclopedia entry. Week offsets are relative to the last spring frost."""

    __tablename__ = "plant_guides"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), index=True)
    scientific_name: Mapped[Optional[str]] = mapped_column(String(200))
    category: Mapped[str] = mapped_column(
        Enum("vegetable", "fruit", "herb", "flower", name="plant_category_enum"), index=True
    )

    # Schedule offsets (weeks)
    indoor_start_weeks: Mapped[Optional[int]] = mapped_column(Integer)  # weeks before frost, unsigned
    outdoor_start_weeks: Mapped[Optional[int]] = mapped_column(Integer)  # signed, relative to frost
    transplant_weeks: Mapped[Optional[int]] = mapped_column(Integer)  # signed, relative to frost
    harvest_weeks: Mapped[Optional[int]] = mapped_column(Integer)  # after outdoor start / transplant

    description: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    seeds: Mapped[list["Seed"]] = relationship(back_populates="plant_guide")
    wishlist_items: Mapped[list["WishlistItem"]] = relationship(back_populates="plant_guide")
