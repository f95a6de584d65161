"""
Unit Tests for JobProcessor

Drain ordering, batching, terminal bookkeeping and per-kind recipes.
"""

from datetime import timedelta

import pytest

from conftest import RecordingDispatcher, seed_contact
from models.notification_models import NotificationKind
from models.reminder_models import JobKind, JobStatus, ReminderJob
from orchestrator.job_processor import JobProcessor

def make_job(now, minutes_ago=0, kind=JobKind.DEADLINE, user_id='u1', **data):
    return ReminderJob(
        type=kind,
        user_id=user_id,
        application_id='a1',
        scheduled_for=now - timedelta(minutes=minutes_ago),
        data={'program_name': 'MSc Physics', 'deadline': '2025-03-13', 'days_until_deadline': 3, **data},
    )

@pytest.mark.asyncio
async def test_drain_respects_batch_size_and_order(store, dispatcher, now):
    await seed_contact(store)
    jobs = [make_job(now, minutes_ago=60 - i) for i in range(60)]
    for job in reversed(jobs):
        await store.enqueue_job(job)
    processor = JobProcessor(store, dispatcher)

    processed = await processor.drain_due_jobs(now, limit=50)

    assert processed == 50
    sent = await store.list_jobs('u1', JobStatus.SENT)
    pending = await store.list_jobs('u1', JobStatus.PENDING)
    assert [job.id for job in sent] == [job.id for job in jobs[:50]]
    assert [job.id for job in pending] == [job.id for job in jobs[50:]]
    assert all(job.processed_at == now for job in sent)

@pytest.mark.asyncio
async def test_future_jobs_are_not_due(store, dispatcher, now):
    await seed_contact(store)
    future = make_job(now, minutes_ago=-5)
    await store.enqueue_job(future)

    assert await JobProcessor(store, dispatcher).drain_due_jobs(now) == 0
    assert (await store.get_job(future.id)).status == JobStatus.PENDING

@pytest.mark.asyncio
async def test_deadline_job_dispatches_with_contact(store, dispatcher, now):
    await seed_contact(store)
    job = make_job(now)
    await store.enqueue_job(job)

    assert await JobProcessor(store, dispatcher).drain_due_jobs(now) == 1

    user_id, kind, payload = dispatcher.calls[0]
    assert user_id == 'u1'
    assert kind == NotificationKind.DEADLINE_REMINDER
    assert payload['email'] == 'u1@example.com'
    assert payload['full_name'] == 'Ada Lovelace'
    assert payload['application_id'] == 'a1'
    assert payload['days_until_deadline'] == 3

@pytest.mark.asyncio
async def test_missing_contact_fails_job(store, dispatcher, now):
    job = make_job(now, user_id='ghost')
    await store.enqueue_job(job)

    assert await JobProcessor(store, dispatcher).drain_due_jobs(now) == 1

    stored = await store.get_job(job.id)
    assert stored.status == JobStatus.FAILED
    assert stored.processed_at == now
    assert dispatcher.calls == []

@pytest.mark.asyncio
async def test_dispatch_failure_fails_job_and_batch_continues(store, now):
    await seed_contact(store)
    first, second = make_job(now, minutes_ago=2), make_job(now, minutes_ago=1)
    await store.enqueue_job(first)
    await store.enqueue_job(second)

    processed = await JobProcessor(store, RecordingDispatcher(fail=True)).drain_due_jobs(now)

    assert processed == 2
    assert (await store.get_job(first.id)).status == JobStatus.FAILED
    assert (await store.get_job(second.id)).status == JobStatus.FAILED

@pytest.mark.asyncio
async def test_failed_jobs_are_not_retried(store, now):
    job = make_job(now, user_id='ghost')
    await store.enqueue_job(job)
    processor = JobProcessor(store, RecordingDispatcher())

    assert await processor.drain_due_jobs(now) == 1
    assert await processor.drain_due_jobs(now + timedelta(hours=1)) == 0

@pytest.mark.asyncio
@pytest.mark.parametrize("kind", [JobKind.STATUS_UPDATE, JobKind.CUSTOM])
async def test_placeholder_kinds_are_marked_sent(store, dispatcher, now, kind):
    job = make_job(now, kind=kind)
    await store.enqueue_job(job)

    assert await JobProcessor(store, dispatcher).drain_due_jobs(now) == 1
    assert (await store.get_job(job.id)).status == JobStatus.SENT
    assert dispatcher.calls == []

@pytest.mark.asyncio
async def test_status_write_failure_is_not_counted(store, dispatcher, now, monkeypatch):
    await seed_contact(store)
    job = make_job(now)
    await store.enqueue_job(job)

    async def broken_update(job_id, status, processed_at):
        raise RuntimeError("store offline")

    monkeypatch.setattr(store, 'update_job_status', broken_update)

    assert await JobProcessor(store, dispatcher).drain_due_jobs(now) == 0
