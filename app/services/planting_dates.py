"""
Week-offset arithmetic against the last frost date.

Sign conventions differ per stage and are kept exactly as stored:
indoor start is unsigned "weeks before frost"; outdoor start and transplant
are signed weeks relative to frost; harvest counts forward from the outdoor
start (or transplant when there is no outdoor start).
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional


@dataclass(frozen=True)
class PlantScheduleOffsets:
    indoor_start_weeks: Optional[int] = None
    outdoor_start_weeks: Optional[int] = None
    transplant_weeks: Optional[int] = None
    harvest_weeks: Optional[int] = None

    @classmethod
    def from_record(cls, record) -> "PlantScheduleOffsets":
        """Read the four offset columns off a guide, seed or wishlist row."""
        return cls(
            indoor_start_weeks=record.indoor_start_weeks,
            outdoor_start_weeks=record.outdoor_start_weeks,
            transplant_weeks=record.transplant_weeks,
            harvest_weeks=record.harvest_weeks,
        )

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (
                self.indoor_start_weeks,
                self.outdoor_start_weeks,
                self.transplant_weeks,
                self.harvest_weeks,
            )
        )


@dataclass(frozen=True)
class PlantingDates:
    indoor_start: Optional[date] = None
    outdoor_start: Optional[date] = None
    transplant: Optional[date] = None
    harvest: Optional[date] = None


def calculate_planting_dates(last_frost: date, offsets: PlantScheduleOffsets) -> PlantingDates:
    indoor_start = None
    if offsets.indoor_start_weeks is not None:
        indoor_start = last_frost - timedelta(weeks=abs(offsets.indoor_start_weeks))

    outdoor_start = None
    if offsets.outdoor_start_weeks is not None:
        outdoor_start = last_frost + timedelta(weeks=offsets.outdoor_start_weeks)

    transplant = None
    if offsets.transplant_weeks is not None:
        transplant = last_frost + timedelta(weeks=offsets.transplant_weeks)

    harvest = None
    base = outdoor_start if outdoor_start is not None else transplant
    if base is not None and offsets.harvest_weeks is not None:
        harvest = base + timedelta(weeks=offsets.harvest_weeks)

    return PlantingDates(
        indoor_start=indoor_start,
        outdoor_start=outdoor_start,
        transplant=transplant,
        harvest=harvest,
    )
