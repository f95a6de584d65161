"""
In-Memory Store

Dict-backed implementation of BaseStore. Used by the test-suite and by hosts
that run with STORE_BACKEND=memory. Every write goes through an asyncio.Lock
and records are copied on the way in and out, so callers never hold a
reference into the store's state.
"""

import asyncio
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from errors import DuplicateReminderError, RecordNotFound
from models.application_models import OPEN_STATUSES, Application, ApplicationStatus, StatusHistoryEntry
from models.reminder_models import DeadlineReminder, JobStatus, ReminderJob, ReminderRule
from models.user_models import UserContact
from storage.base_store import BaseStore
from utils.date_utils import ensure_aware

class MemoryStore(BaseStore):
    def __init__(self):
        self._lock = asyncio.Lock()
        self.applications: Dict[str, Application] = {}
        self.status_history: List[StatusHistoryEntry] = []
        self.reminder_rules: Dict[str, ReminderRule] = {}
        self.deadline_reminders: Dict[Tuple[str, int], DeadlineReminder] = {}
        self.jobs: Dict[str, ReminderJob] = {}
        self.user_contacts: Dict[str, UserContact] = {}

    # Applications & history

    async def get_application(self, application_id: str) -> Optional[Application]:
        app = self.applications.get(application_id)
        return app.model_copy() if app else None

    async def update_application_status(
        self, application_id: str, status: ApplicationStatus, updated_at: datetime
    ) -> None:
        async with self._lock:
            app = self.applications.get(application_id)
            if app is None:
                raise RecordNotFound('application', application_id)
            self.applications[application_id] = app.model_copy(
                update={'status': status, 'updated_at': updated_at}
            )

    async def append_status_history(self, entry: StatusHistoryEntry) -> None:
        async with self._lock:
            self.status_history.append(entry)

    async def list_open_applications_with_deadline_before(self, cutoff: date) -> List[Application]:
        return [
            app.model_copy()
            for app in self.applications.values()
            if app.status in OPEN_STATUSES and app.deadline <= cutoff
        ]

    async def save_application(self, application: Application) -> None:
        async with self._lock:
            self.applications[application.id] = application.model_copy()

    async def list_applications(self, user_id: str) -> List[Application]:
        return [app.model_copy() for app in self.applications.values() if app.user_id == user_id]

    async def list_status_history(self, application_id: str) -> List[StatusHistoryEntry]:
        return [entry for entry in self.status_history if entry.application_id == application_id]

    # Reminder rules & deadline reminders

    async def get_active_reminder_rules(self, user_id: str) -> List[ReminderRule]:
        return [rule for rule in await self.list_reminder_rules(user_id) if rule.is_active]

    async def list_reminder_rules(self, user_id: str) -> List[ReminderRule]:
        return [rule.model_copy(deep=True) for rule in self.reminder_rules.values() if rule.user_id == user_id]

    async def get_reminder_rule(self, rule_id: str) -> Optional[ReminderRule]:
        rule = self.reminder_rules.get(rule_id)
        return rule.model_copy(deep=True) if rule else None

    async def save_reminder_rule(self, rule: ReminderRule) -> None:
        async with self._lock:
            self.reminder_rules[rule.id] = rule.model_copy(deep=True)

    async def reminder_exists(self, application_id: str, days_until_deadline: int) -> bool:
        return (application_id, days_until_deadline) in self.deadline_reminders

    async def insert_deadline_reminder(self, reminder: DeadlineReminder) -> None:
        async with self._lock:
            if reminder.natural_key in self.deadline_reminders:
                raise DuplicateReminderError(reminder.application_id, reminder.days_until_deadline)
            self.deadline_reminders[reminder.natural_key] = reminder.model_copy()

    # Jobs

    async def enqueue_job(self, job: ReminderJob) -> None:
        async with self._lock:
            self.jobs[job.id] = job.model_copy(deep=True)

    async def fetch_due_jobs(self, now: datetime, limit: int) -> List[ReminderJob]:
        now = ensure_aware(now)
        due = [
            job for job in self.jobs.values()
            if job.status == JobStatus.PENDING and ensure_aware(job.scheduled_for) <= now
        ]
        due.sort(key=lambda job: ensure_aware(job.scheduled_for))
        return [job.model_copy(deep=True) for job in due[:limit]]

    async def update_job_status(
        self, job_id: str, status: JobStatus, processed_at: Optional[datetime]
    ) -> None:
        async with self._lock:
            job = self.jobs.get(job_id)
            if job is None:
                raise RecordNotFound('reminder_job', job_id)
            self.jobs[job_id] = job.model_copy(update={'status': status, 'processed_at': processed_at})

    async def get_job(self, job_id: str) -> Optional[ReminderJob]:
        job = self.jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def list_jobs(self, user_id: str, status: Optional[JobStatus] = None) -> List[ReminderJob]:
        jobs = [
            job.model_copy(deep=True) for job in self.jobs.values()
            if job.user_id == user_id and (status is None or job.status == status)
        ]
        jobs.sort(key=lambda job: ensure_aware(job.scheduled_for))
        return jobs

    # Users

    async def get_user_contact(self, user_id: str) -> Optional[UserContact]:
        contact = self.user_contacts.get(user_id)
        return contact.model_copy() if contact else None

    async def save_user_contact(self, contact: UserContact) -> None:
        async with self._lock:
            self.user_contacts[contact.user_id] = contact.model_copy()
