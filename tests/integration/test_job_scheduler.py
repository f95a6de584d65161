"""
Integration Tests for the JobScheduler

Drive the full tick (sweep -> drain) against a real store and the file
outbox, and exercise the background loop lifecycle.
"""

import asyncio
from datetime import timedelta

import pytest

from conftest import RecordingDispatcher, seed_application, seed_contact, seed_rule
from engines import ReminderRuleEngine, StatusTransitionEngine
from main import build_components
from models.application_models import ApplicationStatus
from models.notification_models import NotificationKind
from models.reminder_models import JobStatus
from orchestrator import JobProcessor, JobQueue, JobScheduler

S = ApplicationStatus

class SlowDispatcher(RecordingDispatcher):
    async def dispatch(self, user_id, kind, payload):
        await asyncio.sleep(0.3)
        return await super().dispatch(user_id, kind, payload)

def make_scheduler(store, dispatcher, now, interval=60, run_on_start=True):
    return JobScheduler(
        ReminderRuleEngine(store),
        JobProcessor(store, dispatcher),
        interval_seconds=interval,
        batch_size=50,
        clock=lambda: now,
        run_on_start=run_on_start,
    )

@pytest.mark.asyncio
async def test_under_review_application_three_days_out(store, dispatcher, now):
    app = await seed_application(store, status=S.UNDER_REVIEW, days_out=3, program_name='PhD Biology')
    await seed_rule(store, [7, 3, 1])
    await seed_contact(store)
    scheduler = make_scheduler(store, dispatcher, now)

    result = await scheduler.run_tick()

    assert result.reminders_created == 1
    assert result.jobs_processed == 1
    assert await store.reminder_exists(app.id, 3)
    jobs = await store.list_jobs('u1')
    assert [job.status for job in jobs] == [JobStatus.SENT]

    user_id, kind, payload = dispatcher.calls[0]
    assert kind == NotificationKind.DEADLINE_REMINDER
    assert payload['days_until_deadline'] == 3
    assert payload['program_name'] == 'PhD Biology'

    # same day again: nothing new
    again = await scheduler.run_tick(now + timedelta(hours=2))
    assert again.reminders_created == 0
    assert again.jobs_processed == 0
    assert len(dispatcher.calls) == 1

@pytest.mark.asyncio
async def test_reminder_follows_the_calendar(store, dispatcher, now):
    app = await seed_application(store, status=S.SUBMITTED, days_out=3)
    await seed_rule(store, [3, 1])
    await seed_contact(store)
    scheduler = make_scheduler(store, dispatcher, now)

    for day in range(4):
        await scheduler.run_tick(now + timedelta(days=day))

    assert await store.reminder_exists(app.id, 3)
    assert await store.reminder_exists(app.id, 1)
    assert [payload['days_until_deadline'] for _, _, payload in dispatcher.calls] == [3, 1]
    assert scheduler.get_status()['tick_count'] == 4

@pytest.mark.asyncio
async def test_withdrawn_application_stops_reminders(store, dispatcher, now):
    app = await seed_application(store, status=S.SUBMITTED, days_out=3)
    await seed_rule(store, [3])
    await seed_contact(store)
    await StatusTransitionEngine(store, dispatcher).transition(app.id, S.WITHDRAWN, now=now)
    scheduler = make_scheduler(store, dispatcher, now)

    result = await scheduler.run_tick()

    assert result.reminders_created == 0
    assert [kind for _, kind, _ in dispatcher.calls] == [NotificationKind.STATUS_CHANGED]

@pytest.mark.asyncio
async def test_failed_delivery_is_recorded(store, now):
    await seed_application(store, status=S.DRAFT, days_out=1)
    await seed_rule(store, [1])
    await seed_contact(store)
    scheduler = make_scheduler(store, RecordingDispatcher(fail=True), now)

    result = await scheduler.run_tick()

    assert result.reminders_created == 1
    assert result.jobs_processed == 1
    assert [job.status for job in await store.list_jobs('u1')] == [JobStatus.FAILED]

@pytest.mark.asyncio
async def test_sweep_failure_does_not_skip_drain(store, dispatcher, now, monkeypatch):
    await seed_contact(store)
    scheduler = make_scheduler(store, dispatcher, now)

    async def broken_candidates(cutoff):
        raise RuntimeError("applications table locked")

    monkeypatch.setattr(store, 'list_open_applications_with_deadline_before', broken_candidates)
    await JobQueue(store).create_job('u1', 'custom', now - timedelta(minutes=1), now=now)

    result = await scheduler.run_tick()

    assert result.reminders_created == 0
    assert result.jobs_processed == 1

@pytest.mark.asyncio
async def test_background_loop_start_and_stop(store, dispatcher, now):
    await seed_application(store, status=S.PLANNING, days_out=7)
    await seed_rule(store, [7])
    await seed_contact(store)
    scheduler = make_scheduler(store, dispatcher, now, interval=0.01)

    await scheduler.start()
    assert scheduler.get_status()['is_running'] is True
    await asyncio.sleep(0.1)
    await scheduler.stop()

    status = scheduler.get_status()
    assert status['is_running'] is False
    assert status['tick_count'] >= 2
    assert status['last_tick_at'] == now
    assert len(dispatcher.calls) == 1

    ticks = status['tick_count']
    await asyncio.sleep(0.05)
    assert scheduler.get_status()['tick_count'] == ticks

@pytest.mark.asyncio
async def test_loop_without_run_on_start_waits_one_interval(store, dispatcher, now):
    scheduler = make_scheduler(store, dispatcher, now, interval=30, run_on_start=False)

    await scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    assert scheduler.tick_count == 0

@pytest.mark.asyncio
async def test_stop_lets_in_flight_tick_finish(store, now):
    await seed_application(store, status=S.SUBMITTED, days_out=3)
    await seed_rule(store, [3])
    await seed_contact(store)
    dispatcher = SlowDispatcher()
    scheduler = make_scheduler(store, dispatcher, now)

    await scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    assert scheduler.tick_count == 1
    assert scheduler.last_tick.jobs_processed == 1
    assert len(dispatcher.calls) == 1
    assert [job.status for job in await store.list_jobs('u1')] == [JobStatus.SENT]

@pytest.mark.asyncio
async def test_manual_ticks_do_not_overlap(store, dispatcher, now, monkeypatch):
    scheduler = make_scheduler(store, dispatcher, now)
    active = 0
    peak = 0

    async def slow_sweep(tick_now):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.02)
        active -= 1
        return 0

    monkeypatch.setattr(scheduler.reminder_engine, 'sweep', slow_sweep)

    await asyncio.gather(scheduler.run_tick(), scheduler.run_tick(), scheduler.run_tick())

    assert peak == 1
    assert scheduler.tick_count == 3

def test_scheduler_rejects_bad_interval(store, dispatcher):
    with pytest.raises(ValueError):
        JobScheduler(ReminderRuleEngine(store), JobProcessor(store, dispatcher), interval_seconds=0)

@pytest.mark.asyncio
async def test_components_from_settings(test_settings, now):
    components = build_components(test_settings)
    store = components['store']
    await seed_application(store, status=S.UNDER_REVIEW, days_out=3)
    await components['reminder_engine'].create_default_rules('u1')
    await seed_contact(store)

    result = await components['scheduler'].run_tick(now)

    assert result.reminders_created == 1
    outbox = await components['dispatcher'].read_outbox()
    assert len(outbox) == 1
    assert outbox[0].type == 'warning'
    assert outbox[0].metadata['email'] == 'u1@example.com'
    assert components['scheduler'].interval_seconds == 0.05
