from datetime import date, timedelta

from app.services.planting_dates import PlantScheduleOffsets, calculate_planting_dates

FROST = date(2025, 4, 15)


def test_full_schedule_against_april_frost():
    dates = calculate_planting_dates(
        FROST,
        PlantScheduleOffsets(
            indoor_start_weeks=8, outdoor_start_weeks=0, transplant_weeks=2, harvest_weeks=60
        ),
    )
    assert dates.indoor_start == date(2025, 2, 18)
    assert dates.outdoor_start == date(2025, 4, 15)
    assert dates.transplant == date(2025, 4, 29)
    assert dates.harvest == date(2026, 6, 9)


def test_indoor_start_always_counts_back():
    for weeks in range(1, 20):
        expected = FROST - timedelta(weeks=weeks)
        assert calculate_planting_dates(FROST, PlantScheduleOffsets(indoor_start_weeks=weeks)).indoor_start == expected
        assert calculate_planting_dates(FROST, PlantScheduleOffsets(indoor_start_weeks=-weeks)).indoor_start == expected


def test_outdoor_and_transplant_are_signed():
    for weeks in range(-10, 11):
        dates = calculate_planting_dates(
            FROST, PlantScheduleOffsets(outdoor_start_weeks=weeks, transplant_weeks=weeks)
        )
        assert dates.outdoor_start == FROST + timedelta(weeks=weeks)
        assert dates.transplant == FROST + timedelta(weeks=weeks)


def test_harvest_prefers_outdoor_start():
    dates = calculate_planting_dates(
        FROST, PlantScheduleOffsets(outdoor_start_weeks=-2, transplant_weeks=3, harvest_weeks=8)
    )
    assert dates.harvest == date(2025, 4, 1) + timedelta(weeks=8)


def test_harvest_falls_back_to_transplant():
    dates = calculate_planting_dates(FROST, PlantScheduleOffsets(transplant_weeks=3, harvest_weeks=8))
    assert dates.outdoor_start is None
    assert dates.harvest == date(2025, 5, 6) + timedelta(weeks=8)


def test_missing_offsets_yield_none():
    dates = calculate_planting_dates(FROST, PlantScheduleOffsets(harvest_weeks=10))
    assert dates.indoor_start is None
    assert dates.outdoor_start is None
    assert dates.transplant is None
    assert dates.harvest is None

    dates = calculate_planting_dates(FROST, PlantScheduleOffsets(outdoor_start_weeks=1))
    assert dates.harvest is None


def test_dates_may_leave_the_frost_year():
    dates = calculate_planting_dates(date(2025, 1, 15), PlantScheduleOffsets(indoor_start_weeks=10))
    assert dates.indoor_start == date(2024, 11, 6)
