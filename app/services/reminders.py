"""
Planting reminder selection and message composition.

Toggle scopes: if any global reminder toggle is on, the global toggles apply
to every item and per-seed flags are ignored. Only when all three global
toggles are off do per-seed flags take effect (wishlist items carry none).

Selection order is toggle filter -> window match -> dedupe against the
reminder log, so a disabled stage never consumes a log row.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from app.core.config import settings
from app.models.seed import Seed
from app.services.planting_schedule import (
    REMINDER_TYPES,
    STAGE_DIRECT_SOW,
    STAGE_INDOOR_START,
    STAGE_TRANSPLANT,
    PlantingEvent,
)

REMINDER_SECTIONS = {
    STAGE_INDOOR_START: ("Start indoors", "These seeds need to be started indoors:"),
    STAGE_DIRECT_SOW: ("Direct sow outside", "These seeds can be planted directly in your garden:"),
    STAGE_TRANSPLANT: ("Transplant seedlings", "These seedlings are ready to be transplanted outdoors:"),
}


# ── Toggle precedence ─────────────────────────────────────────────────────────


def global_reminder_types(profile) -> frozenset[str]:
    if profile is None:
        return frozenset()
    flags = {
        STAGE_INDOOR_START: profile.enable_indoor_start_reminders,
        STAGE_DIRECT_SOW: profile.enable_direct_sow_reminders,
        STAGE_TRANSPLANT: profile.enable_transplant_reminders,
    }
    return frozenset(t for t, on in flags.items() if on)


def seed_reminder_types(seed: Seed) -> frozenset[str]:
    flags = {
        STAGE_INDOOR_START: seed.enable_indoor_start_reminder,
        STAGE_DIRECT_SOW: seed.enable_direct_sow_reminder,
        STAGE_TRANSPLANT: seed.enable_transplant_reminder,
    }
    return frozenset(t for t, on in flags.items() if on)


def uses_per_item_toggles(profile) -> bool:
    return not global_reminder_types(profile)


def enabled_reminder_types(profile, item) -> frozenset[str]:
    """Reminder types ``item`` may produce for the owner of ``profile``."""
    global_types = global_reminder_types(profile)
    if global_types:
        return global_types
    if isinstance(item, Seed):
        return seed_reminder_types(item)
    return frozenset()


def resolve_lead_days(profile) -> int:
    lead = profile.reminder_lead_days if profile is not None else None
    return settings.REMINDER_DEFAULT_LEAD_DAYS if lead is None else lead


# ── Window / dedupe ───────────────────────────────────────────────────────────


def match_window(events: Iterable[PlantingEvent], today: date, lead_days: int) -> list[PlantingEvent]:
    """Events dated within [today, today + lead_days], both ends inclusive."""
    end = today + timedelta(days=lead_days)
    return [e for e in events if today <= e.date <= end]


def reminder_key(reminder_type: str, target_date: date) -> str:
    return f"{reminder_type}-{target_date.isoformat()}"


def filter_new(candidates: Iterable[PlantingEvent], existing_logs: Iterable) -> list[PlantingEvent]:
    """Drop candidates whose (type, date) already has a reminder log row."""
    sent = {reminder_key(log.reminder_type, log.target_date) for log in existing_logs}
    return [
        c for c in candidates
        if c.reminder_type is not None and reminder_key(c.reminder_type, c.date) not in sent
    ]


def group_by_type(events: Iterable[PlantingEvent]) -> dict[str, list[PlantingEvent]]:
    """Bucket reminder events by type, every bucket present, each sorted by date then name."""
    buckets: dict[str, list[PlantingEvent]] = {t: [] for t in REMINDER_TYPES}
    for event in events:
        if event.reminder_type is not None:
            buckets[event.reminder_type].append(event)
    for bucket in buckets.values():
        bucket.sort(key=lambda e: (e.date, e.plant_label.casefold()))
    return buckets


def log_targets(buckets: dict[str, list[PlantingEvent]]) -> dict[tuple[str, date], list[str]]:
    """Collapse events to one entry per (type, date) with the plant names it covers."""
    targets: dict[tuple[str, date], list[str]] = defaultdict(list)
    for reminder_type, events in buckets.items():
        for event in events:
            names = targets[(reminder_type, event.date)]
            if event.plant_label not in names:
                names.append(event.plant_label)
    return dict(targets)


# ── Message ───────────────────────────────────────────────────────────────────


def _format_date(d: date) -> str:
    return f"{d.strftime('%B')} {d.day}"


def _format_line(event: PlantingEvent) -> str:
    variety = f" ({event.variety})" if event.variety else ""
    source = " (from wishlist)" if event.source_kind == "wishlist" else ""
    return f"  - {event.plant_label}{variety} - {_format_date(event.date)}{source}"


def build_reminder_subject(total: int) -> str:
    return f"Time to start planting! {total} plant{'s' if total != 1 else ''} ready"


def build_reminder_body(
    name: Optional[str],
    buckets: dict[str, list[PlantingEvent]],
    last_frost: date,
    first_frost: Optional[date] = None,
) -> str:
    lines = [f"Hi {name or 'Gardener'},", ""]

    frost_line = f"Based on your last frost date of {_format_date(last_frost)}"
    if first_frost is not None:
        frost_line += f" and first fall frost around {_format_date(first_frost)}"
    lines += [frost_line + ", it's time to start preparing these plants:", ""]

    for reminder_type in REMINDER_TYPES:
        events = buckets.get(reminder_type) or []
        if not events:
            continue
        title, blurb = REMINDER_SECTIONS[reminder_type]
        lines.append(f"{title}:")
        lines.append(f"  {blurb}")
        lines.extend(_format_line(e) for e in events)
        lines.append("")

    lines += [
        f"View your full calendar: {settings.APP_URL}/calendar",
        "",
        "You're receiving this because you enabled planting reminders.",
        f"Manage your notification preferences: {settings.APP_URL}/settings",
    ]
    return "\n".join(lines)
