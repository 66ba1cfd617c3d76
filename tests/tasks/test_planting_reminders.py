from datetime import date, datetime, timezone

from sqlalchemy import select

from app.models.logs import PipelineRun, PlantingReminderLog
from app.models.plant import PlantGuide
from app.models.seed import Seed, WishlistItem
from app.services.email import EmailNotConfiguredError
from app.tasks.planting_reminders import local_today, run_planting_reminders, send_planting_reminders

# Zone 7a -> last frost Apr 15, so 8 weeks before is Feb 18 and 2 weeks after is Apr 29.
NOW = datetime(2025, 2, 15, 8, 0)
INDOOR_ON = {"hardiness_zone": "7a", "enable_indoor_start_reminders": True}


def _tomato():
    return PlantGuide(name="Tomato", category="vegetable", indoor_start_weeks=8, transplant_weeks=2)


def _pepper():
    return PlantGuide(name="Pepper", category="vegetable", indoor_start_weeks=8)


async def _logs(session_factory) -> list[PlantingReminderLog]:
    async with session_factory() as session:
        result = await session.execute(select(PlantingReminderLog).order_by(PlantingReminderLog.id))
        return list(result.scalars().all())


async def _run(session_factory, outbox, now=NOW):
    return await run_planting_reminders(now, session_factory=session_factory, transport=outbox.send)


async def test_sends_one_consolidated_email_and_logs_it(session_factory, outbox, create_user):
    await create_user(profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato(), variety="Roma")])

    result = await _run(session_factory, outbox)

    assert result.as_dict() == {"sent": 1, "failed": 0, "skipped": 0, "errors": []}
    assert len(outbox.messages) == 1
    message = outbox.messages[0]
    assert message.to == "gardener@example.com"
    assert message.subject == "Time to start planting! 1 plant ready"
    assert "Tomato (Roma) - February 18" in message.body

    logs = await _logs(session_factory)
    assert [(l.reminder_type, l.target_date, l.year, l.plant_names) for l in logs] == [
        ("indoor_start", date(2025, 2, 18), 2025, ["Tomato"]),
    ]


async def test_second_run_sends_nothing(session_factory, outbox, create_user):
    await create_user(profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato())])

    await _run(session_factory, outbox)
    second = await _run(session_factory, outbox)

    assert len(outbox.messages) == 1
    assert second.sent == 0
    assert second.skipped == 1
    assert len(await _logs(session_factory)) == 1


async def test_later_day_in_window_is_still_deduplicated(session_factory, outbox, create_user):
    await create_user(profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato())])

    await _run(session_factory, outbox, datetime(2025, 2, 12, 6, 0))
    await _run(session_factory, outbox, datetime(2025, 2, 17, 23, 30))

    assert len(outbox.messages) == 1


async def test_plants_sharing_a_date_collapse_into_one_log_row(session_factory, outbox, create_user):
    await create_user(
        profile=INDOOR_ON,
        seeds=[Seed(plant_guide=_tomato()), Seed(plant_guide=_pepper())],
    )

    await _run(session_factory, outbox)

    assert outbox.messages[0].subject == "Time to start planting! 2 plants ready"
    logs = await _logs(session_factory)
    assert len(logs) == 1
    assert sorted(logs[0].plant_names) == ["Pepper", "Tomato"]


async def test_transport_failure_writes_no_log_and_retries_next_run(session_factory, outbox, create_user):
    await create_user(profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato())])
    outbox.fail_with = ConnectionError("smtp down")

    failed = await _run(session_factory, outbox)

    assert failed.failed == 1
    assert failed.errors == ["Failed to send to gardener@example.com: smtp down"]
    assert await _logs(session_factory) == []

    outbox.fail_with = None
    retried = await _run(session_factory, outbox)

    assert retried.sent == 1
    assert len(outbox.messages) == 1
    assert len(await _logs(session_factory)) == 1


async def test_log_write_failure_counts_as_sent_and_resends_next_run(
    session_factory, outbox, create_user, monkeypatch
):
    await create_user(profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato())])

    async def _broken_record(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(
        "app.tasks.planting_reminders.record_reminders_sent", _broken_record
    )
    first = await _run(session_factory, outbox)

    assert first.sent == 1
    assert len(first.errors) == 1
    assert "failed to record" in first.errors[0]
    assert await _logs(session_factory) == []

    monkeypatch.undo()
    second = await _run(session_factory, outbox)

    assert second.sent == 1
    assert len(outbox.messages) == 2
    assert len(await _logs(session_factory)) == 1


async def test_unconfigured_email_is_skipped_with_error(session_factory, outbox, create_user):
    await create_user(profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato())])
    outbox.fail_with = EmailNotConfiguredError("Email service not configured")

    result = await _run(session_factory, outbox)

    assert result.skipped == 1
    assert result.errors == ["Email service not configured"]
    assert await _logs(session_factory) == []


async def test_per_seed_toggle_when_globals_are_off(session_factory, outbox, create_user):
    await create_user(
        profile={"hardiness_zone": "7a"},
        seeds=[
            Seed(plant_guide=_tomato(), enable_indoor_start_reminder=True),
            Seed(plant_guide=_pepper()),
        ],
        wishlist=[WishlistItem(plant_guide=PlantGuide(name="Eggplant", category="vegetable", indoor_start_weeks=8))],
    )

    result = await _run(session_factory, outbox)

    assert result.sent == 1
    body = outbox.messages[0].body
    assert "Tomato" in body
    assert "Pepper" not in body
    assert "Eggplant" not in body


async def test_user_with_only_untoggled_seeds_is_not_a_candidate(session_factory, outbox, create_user):
    await create_user(profile={"hardiness_zone": "7a"}, seeds=[Seed(plant_guide=_tomato())])

    result = await _run(session_factory, outbox)

    assert result.as_dict() == {"sent": 0, "failed": 0, "skipped": 0, "errors": []}


async def test_disabled_stage_never_consumes_a_log_row(session_factory, outbox, create_user):
    # Indoor start (Feb 18) is in the window but only transplant reminders are on
    await create_user(
        profile={"hardiness_zone": "7a", "enable_transplant_reminders": True},
        seeds=[Seed(plant_guide=_tomato())],
    )

    result = await _run(session_factory, outbox)

    assert result.skipped == 1
    assert outbox.messages == []
    assert await _logs(session_factory) == []

    later = await _run(session_factory, outbox, datetime(2025, 4, 25, 9, 0))
    assert later.sent == 1
    assert [l.reminder_type for l in await _logs(session_factory)] == ["transplant"]


async def test_lead_days_narrow_the_window(session_factory, outbox, create_user):
    await create_user(
        profile={**INDOOR_ON, "reminder_lead_days": 2},
        seeds=[Seed(plant_guide=_tomato())],
    )

    assert (await _run(session_factory, outbox)).skipped == 1
    assert (await _run(session_factory, outbox, datetime(2025, 2, 16, 8, 0))).sent == 1


async def test_unresolvable_frost_date_is_skipped(session_factory, outbox, create_user):
    await create_user(
        "tropics@example.com",
        profile={"hardiness_zone": "11a", "enable_indoor_start_reminders": True},
        seeds=[Seed(plant_guide=_tomato())],
    )
    await create_user(
        "nozone@example.com",
        profile={"enable_indoor_start_reminders": True},
        seeds=[Seed(plant_guide=_pepper())],
    )

    result = await _run(session_factory, outbox)

    assert result.skipped == 2
    assert outbox.messages == []


async def test_user_without_email_is_skipped(session_factory, outbox, create_user):
    await create_user(None, profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato())])

    result = await _run(session_factory, outbox)

    assert result.skipped == 1
    assert outbox.messages == []


async def test_archived_seeds_and_purchased_wishlist_are_ignored(session_factory, outbox, create_user):
    await create_user(
        profile=INDOOR_ON,
        seeds=[Seed(plant_guide=_tomato(), is_archived=True)],
        wishlist=[WishlistItem(plant_guide=_pepper(), purchased=True)],
    )

    result = await _run(session_factory, outbox)

    assert result.skipped == 1
    assert outbox.messages == []


async def test_wishlist_custom_offsets_are_reminded(session_factory, outbox, create_user):
    await create_user(
        profile=INDOOR_ON,
        wishlist=[WishlistItem(custom_plant_name="Tomatillo", variety="Purple", indoor_start_weeks=8)],
    )

    await _run(session_factory, outbox)

    assert "Tomatillo (Purple) - February 18 (from wishlist)" in outbox.messages[0].body


async def test_users_are_processed_independently(session_factory, outbox, create_user):
    await create_user("a@example.com", profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato())])
    await create_user("b@example.com", profile=INDOOR_ON, seeds=[Seed(plant_guide=_pepper())])

    result = await run_planting_reminders(
        NOW, session_factory=session_factory, transport=outbox.send, concurrency=2
    )

    assert result.sent == 2
    assert sorted(m.to for m in outbox.messages) == ["a@example.com", "b@example.com"]
    assert len(await _logs(session_factory)) == 2


def test_local_today_uses_configured_timezone():
    # 03:00 UTC on the 16th is still the evening of the 15th in Chicago
    assert local_today(datetime(2025, 2, 16, 3, 0, tzinfo=timezone.utc)) == date(2025, 2, 15)
    assert local_today(datetime(2025, 2, 16, 3, 0)) == date(2025, 2, 16)


async def test_arq_job_records_pipeline_run(session_factory, outbox, create_user):
    await create_user(profile=INDOOR_ON, seeds=[Seed(plant_guide=_tomato())])
    ctx = {"session_factory": session_factory, "mail_transport": outbox.send, "now": NOW}

    summary = await send_planting_reminders(ctx)

    assert summary["sent"] == 1
    async with session_factory() as session:
        run = (await session.execute(select(PipelineRun))).scalar_one()
    assert run.pipeline_name == "planting_reminders"
    assert run.status == "success"
    assert run.records_processed == 1
    assert run.finished_at is not None
