"""
Frost date resolution.

The last spring frost is the anchor for every planting offset. A user's own
override always wins; otherwise the USDA hardiness zone table supplies a
typical date. Zones 11a and warmer never frost and resolve to None.
"""
import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

FROST_FREE = "Frost-free"

_MONTHS = {name: idx for idx, name in enumerate(calendar.month_abbr) if name}


@dataclass(frozen=True)
class HardinessZoneInfo:
    zone: str
    min_temp_f: int
    max_temp_f: int
    last_frost_spring: str  # "Mon D" or FROST_FREE
    first_frost_fall: str
    description: str


# ── Zone table ────────────────────────────────────────────────────────────────

_ZONE_ROWS = [
    ("1a", -60, -55, "Jun 15", "Jul 15", "Extreme cold"),
    ("1b", -55, -50, "Jun 10", "Jul 20", "Extreme cold"),
    ("2a", -50, -45, "Jun 1", "Aug 1", "Very cold"),
    ("2b", -45, -40, "May 25", "Aug 10", "Very cold"),
    ("3a", -40, -35, "May 20", "Aug 20", "Cold"),
    ("3b", -35, -30, "May 15", "Sep 1", "Cold"),
    ("4a", -30, -25, "May 10", "Sep 10", "Cold"),
    ("4b", -25, -20, "May 5", "Sep 20", "Cold"),
    ("5a", -20, -15, "May 1", "Oct 1", "Moderate"),
    ("5b", -15, -10, "Apr 25", "Oct 10", "Moderate"),
    ("6a", -10, -5, "Apr 20", "Oct 15", "Moderate"),
    ("6b", -5, 0, "Apr 15", "Oct 20", "Moderate"),
    ("7a", 0, 5, "Apr 15", "Oct 25", "Mild"),  # shares 6b's last frost; Apr 15, not Apr 10
    ("7b", 5, 10, "Apr 1", "Nov 1", "Mild"),
    ("8a", 10, 15, "Mar 25", "Nov 10", "Warm"),
    ("8b", 15, 20, "Mar 15", "Nov 15", "Warm"),
    ("9a", 20, 25, "Mar 1", "Nov 25", "Very warm"),
    ("9b", 25, 30, "Feb 15", "Dec 1", "Very warm"),
    ("10a", 30, 35, "Jan 31", "Dec 15", "Hot"),
    ("10b", 35, 40, "Jan 15", "Dec 25", "Hot"),
    ("11a", 40, 45, FROST_FREE, FROST_FREE, "Tropical"),
    ("11b", 45, 50, FROST_FREE, FROST_FREE, "Tropical"),
    ("12a", 50, 55, FROST_FREE, FROST_FREE, "Tropical"),
    ("12b", 55, 60, FROST_FREE, FROST_FREE, "Tropical"),
    ("13a", 60, 65, FROST_FREE, FROST_FREE, "Tropical"),
    ("13b", 65, 70, FROST_FREE, FROST_FREE, "Tropical"),
]

HARDINESS_ZONES: dict[str, HardinessZoneInfo] = {
    row[0]: HardinessZoneInfo(*row) for row in _ZONE_ROWS
}


# ── Helpers ───────────────────────────────────────────────────────────────────


def project_onto_year(month: int, day: int, year: int) -> date:
    """Build month/day in the given year. Feb 29 falls back to Feb 28 off leap years."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def parse_frost_date(value: str, year: int) -> Optional[date]:
    """Parse a zone frost description like "Apr 15" into a date in ``year``.

    Returns None for the "Frost-free" sentinel. Raises ValueError on anything
    else that is not "Mon D".
    """
    if value == FROST_FREE:
        return None
    parts = value.split()
    if len(parts) != 2 or parts[0] not in _MONTHS:
        raise ValueError(f"Unrecognised frost date: {value!r}")
    return project_onto_year(_MONTHS[parts[0]], int(parts[1]), year)


def get_zone_info(
    zone: Optional[str], zones: Optional[Mapping[str, HardinessZoneInfo]] = None
) -> Optional[HardinessZoneInfo]:
    if not zone:
        return None
    table = HARDINESS_ZONES if zones is None else zones
    return table.get(zone.strip().lower())


# ── Resolution ────────────────────────────────────────────────────────────────


def resolve_last_frost_date(
    profile, year: int, zones: Optional[Mapping[str, HardinessZoneInfo]] = None
) -> Optional[date]:
    """
    Resolve the last spring frost date for ``profile`` in ``year``.

    An explicit ``last_frost_date`` is re-projected onto ``year`` (its stored
    year is ignored). Otherwise the profile's hardiness zone is looked up.
    Returns None when neither yields a date.
    """
    if profile is None:
        return None
    if profile.last_frost_date is not None:
        stored = profile.last_frost_date
        return project_onto_year(stored.month, stored.day, year)

    info = get_zone_info(profile.hardiness_zone, zones)
    if info is None:
        if profile.hardiness_zone:
            logger.debug("resolve_last_frost_date: unknown zone %r", profile.hardiness_zone)
        return None
    return parse_frost_date(info.last_frost_spring, year)


def resolve_first_frost_date(
    profile, year: int, zones: Optional[Mapping[str, HardinessZoneInfo]] = None
) -> Optional[date]:
    """Fall counterpart of resolve_last_frost_date."""
    if profile is None:
        return None
    if profile.first_frost_date is not None:
        stored = profile.first_frost_date
        return project_onto_year(stored.month, stored.day, year)

    info = get_zone_info(profile.hardiness_zone, zones)
    if info is None:
        return None
    return parse_frost_date(info.first_frost_fall, year)
