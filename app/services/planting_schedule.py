"""
Planting schedule aggregation.

Turns encyclopedia guides, inventory seeds and wishlist items into a flat list
of dated PlantingEvents for one user. Offsets come from the linked guide when
there is one, otherwise from the item's own custom columns, never a mix.

Inventory is processed before wishlist; the first item to claim a
(plant label, variety) pair wins and later items with the same pair are
skipped.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Collection, Iterable, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.plant import PlantGuide
from app.models.seed import Seed, WishlistItem
from app.models.user import UserSettings
from app.services.frost_dates import resolve_last_frost_date
from app.services.planting_dates import (
    PlantingDates,
    PlantScheduleOffsets,
    calculate_planting_dates,
)

logger = logging.getLogger(__name__)

STAGE_INDOOR_START = "indoor_start"
STAGE_DIRECT_SOW = "direct_sow"
STAGE_TRANSPLANT = "transplant"
STAGE_HARVEST = "harvest"

REMINDER_TYPES = (STAGE_INDOOR_START, STAGE_DIRECT_SOW, STAGE_TRANSPLANT)
ALL_STAGES = REMINDER_TYPES + (STAGE_HARVEST,)

VIEW_ALL = "all"
VIEW_INVENTORY = "inventory"
VIEW_INVENTORY_WISHLIST = "inventory-wishlist"
VIEWS = (VIEW_ALL, VIEW_INVENTORY, VIEW_INVENTORY_WISHLIST)

UNKNOWN_PLANT = "Unknown Plant"

StageSelector = Callable[[object], Collection[str]]


@dataclass(frozen=True)
class PlantingEvent:
    plant_label: str
    stage: str
    date: date
    source_kind: str  # "guide", "seed" or "wishlist"
    variety: Optional[str] = None
    category: Optional[str] = None

    @property
    def reminder_type(self) -> Optional[str]:
        return self.stage if self.stage in REMINDER_TYPES else None


# ── Precedence ────────────────────────────────────────────────────────────────


def effective_offsets(item) -> Optional[PlantScheduleOffsets]:
    """Linked guide wins outright; custom offsets only apply to unlinked items."""
    if item.plant_guide is not None:
        return PlantScheduleOffsets.from_record(item.plant_guide)
    offsets = PlantScheduleOffsets.from_record(item)
    return None if offsets.is_empty() else offsets


def plant_label(item) -> str:
    if item.plant_guide is not None and item.plant_guide.name:
        return item.plant_guide.name
    return item.custom_plant_name or getattr(item, "nickname", None) or UNKNOWN_PLANT


def item_category(item) -> Optional[str]:
    if item.plant_guide is not None and item.plant_guide.category:
        return item.plant_guide.category
    return item.custom_category


# ── Event derivation ──────────────────────────────────────────────────────────


def _stage_dates(dates: PlantingDates) -> dict[str, Optional[date]]:
    return {
        STAGE_INDOOR_START: dates.indoor_start,
        STAGE_DIRECT_SOW: dates.outdoor_start,
        STAGE_TRANSPLANT: dates.transplant,
        STAGE_HARVEST: dates.harvest,
    }


def derive_events(
    last_frost: date,
    offsets: PlantScheduleOffsets,
    *,
    label: str,
    source_kind: str,
    variety: Optional[str] = None,
    category: Optional[str] = None,
    stages: Collection[str] = ALL_STAGES,
) -> list[PlantingEvent]:
    """One event per derivable date, restricted to ``stages``."""
    dates = calculate_planting_dates(last_frost, offsets)
    return [
        PlantingEvent(
            plant_label=label,
            stage=stage,
            date=when,
            source_kind=source_kind,
            variety=variety,
            category=category,
        )
        for stage, when in _stage_dates(dates).items()
        if when is not None and stage in stages
    ]


def aggregate_events(
    last_frost: date,
    *,
    guides: Iterable[PlantGuide] = (),
    seeds: Iterable[Seed] = (),
    wishlist_items: Iterable[WishlistItem] = (),
    category: Optional[str] = None,
    stages_for: Optional[StageSelector] = None,
) -> list[PlantingEvent]:
    """
    Merge guide, inventory and wishlist schedules into one event list.

    ``stages_for`` receives each seed / wishlist item and returns the stages
    it may emit. Only items that produce at least one dated event claim their
    (label, variety) pair. Guides always emit every stage.
    """
    events: list[PlantingEvent] = []

    for guide in guides:
        if category and guide.category != category:
            continue
        events.extend(
            derive_events(
                last_frost,
                PlantScheduleOffsets.from_record(guide),
                label=guide.name,
                source_kind="guide",
                category=guide.category,
            )
        )

    seen: set[tuple[str, str]] = set()
    for source_kind, items in (("seed", seeds), ("wishlist", wishlist_items)):
        for item in items:
            cat = item_category(item)
            if category and cat != category:
                continue
            stages = ALL_STAGES if stages_for is None else stages_for(item)
            if not stages:
                continue

            offsets = effective_offsets(item)
            if offsets is None:
                continue
            label = plant_label(item)
            item_events = derive_events(
                last_frost,
                offsets,
                label=label,
                source_kind=source_kind,
                variety=item.variety,
                category=cat,
                stages=stages,
            )
            if not item_events:
                continue

            key = (label, item.variety or "")
            if key in seen:
                logger.debug("aggregate_events: skipping duplicate %s %r", source_kind, key)
                continue
            seen.add(key)
            events.extend(item_events)

    return events


def sort_events(events: Iterable[PlantingEvent]) -> list[PlantingEvent]:
    return sorted(events, key=lambda e: (e.plant_label.casefold(), e.date, e.stage))


# ── Queries ───────────────────────────────────────────────────────────────────


async def load_plant_guides(db: AsyncSession, category: Optional[str] = None) -> list[PlantGuide]:
    query = select(PlantGuide).where(
        or_(
            PlantGuide.indoor_start_weeks.isnot(None),
            PlantGuide.outdoor_start_weeks.isnot(None),
            PlantGuide.transplant_weeks.isnot(None),
        )
    )
    if category:
        query = query.where(PlantGuide.category == category)
    result = await db.execute(query.order_by(PlantGuide.name))
    return list(result.scalars().all())


async def load_inventory(
    db: AsyncSession, user_id: int, *, with_reminders_only: bool = False
) -> list[Seed]:
    """Non-archived seeds with their guide loaded, oldest first."""
    query = (
        select(Seed)
        .options(selectinload(Seed.plant_guide))
        .where(Seed.user_id == user_id, Seed.is_archived == False)
    )
    if with_reminders_only:
        query = query.where(
            or_(
                Seed.enable_indoor_start_reminder == True,
                Seed.enable_direct_sow_reminder == True,
                Seed.enable_transplant_reminder == True,
            )
        )
    result = await db.execute(query.order_by(Seed.id))
    return list(result.scalars().all())


async def load_wishlist(db: AsyncSession, user_id: int) -> list[WishlistItem]:
    """Wishlist items not yet purchased, with their guide loaded."""
    result = await db.execute(
        select(WishlistItem)
        .options(selectinload(WishlistItem.plant_guide))
        .where(WishlistItem.user_id == user_id, WishlistItem.purchased == False)
        .order_by(WishlistItem.id)
    )
    return list(result.scalars().all())


async def get_user_settings(db: AsyncSession, user_id: int) -> Optional[UserSettings]:
    result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    return result.scalar_one_or_none()


async def build_calendar(
    db: AsyncSession,
    user_id: int,
    year: int,
    view: str = VIEW_ALL,
    category: Optional[str] = None,
) -> list[PlantingEvent]:
    """Sorted planting calendar for ``user_id``. Empty when no frost date resolves."""
    if view not in VIEWS:
        raise ValueError(f"Unknown calendar view: {view!r}")
    if category == "all":
        category = None

    profile = await get_user_settings(db, user_id)
    last_frost = resolve_last_frost_date(profile, year)
    if last_frost is None:
        logger.info("build_calendar: no frost date for user %d", user_id)
        return []

    if view == VIEW_ALL:
        guides = await load_plant_guides(db, category)
        return sort_events(aggregate_events(last_frost, guides=guides, category=category))

    seeds = await load_inventory(db, user_id)
    wishlist = await load_wishlist(db, user_id) if view == VIEW_INVENTORY_WISHLIST else []
    return sort_events(
        aggregate_events(last_frost, seeds=seeds, wishlist_items=wishlist, category=category)
    )
