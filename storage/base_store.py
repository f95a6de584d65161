"""
Persistent Store Contract

The read/write operations the engines and the scheduler need from durable
storage. Backends own their own locking; the only cross-call guarantee the
engines rely on is the natural key on deadline reminders:
`insert_deadline_reminder` must raise DuplicateReminderError when a row for
the same (application_id, days_until_deadline) already exists.

All methods are coroutines so a backend may await real I/O.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional

from models.application_models import Application, ApplicationStatus, StatusHistoryEntry
from models.reminder_models import DeadlineReminder, JobStatus, ReminderJob, ReminderRule
from models.user_models import UserContact

class BaseStore(ABC):

    # -------------------------------------------------------------------------
    # Applications & history
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_application(self, application_id: str) -> Optional[Application]:
        """Return the application or None when it does not exist."""

    @abstractmethod
    async def update_application_status(
        self, application_id: str, status: ApplicationStatus, updated_at: datetime
    ) -> None:
        """Persist a new status. Raises RecordNotFound for unknown ids."""

    @abstractmethod
    async def append_status_history(self, entry: StatusHistoryEntry) -> None:
        ...

    @abstractmethod
    async def list_open_applications_with_deadline_before(self, cutoff: date) -> List[Application]:
        """Applications in an open status whose deadline is on or before `cutoff`."""

    @abstractmethod
    async def save_application(self, application: Application) -> None:
        """Insert or replace an application (host-side setup)."""

    @abstractmethod
    async def list_applications(self, user_id: str) -> List[Application]:
        ...

    @abstractmethod
    async def list_status_history(self, application_id: str) -> List[StatusHistoryEntry]:
        """History rows in insertion order."""

    # -------------------------------------------------------------------------
    # Reminder rules & deadline reminders
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_active_reminder_rules(self, user_id: str) -> List[ReminderRule]:
        ...

    @abstractmethod
    async def list_reminder_rules(self, user_id: str) -> List[ReminderRule]:
        ...

    @abstractmethod
    async def get_reminder_rule(self, rule_id: str) -> Optional[ReminderRule]:
        ...

    @abstractmethod
    async def save_reminder_rule(self, rule: ReminderRule) -> None:
        """Insert or replace a rule."""

    @abstractmethod
    async def reminder_exists(self, application_id: str, days_until_deadline: int) -> bool:
        ...

    @abstractmethod
    async def insert_deadline_reminder(self, reminder: DeadlineReminder) -> None:
        """Insert a reminder. Raises DuplicateReminderError on a natural-key clash."""

    # -------------------------------------------------------------------------
    # Jobs
    # -------------------------------------------------------------------------

    @abstractmethod
    async def enqueue_job(self, job: ReminderJob) -> None:
        ...

    @abstractmethod
    async def fetch_due_jobs(self, now: datetime, limit: int) -> List[ReminderJob]:
        """Pending jobs with scheduled_for <= now, oldest first, at most `limit`."""

    @abstractmethod
    async def update_job_status(
        self, job_id: str, status: JobStatus, processed_at: Optional[datetime]
    ) -> None:
        """Raises RecordNotFound for unknown ids."""

    @abstractmethod
    async def get_job(self, job_id: str) -> Optional[ReminderJob]:
        ...

    @abstractmethod
    async def list_jobs(self, user_id: str, status: Optional[JobStatus] = None) -> List[ReminderJob]:
        """Jobs of one user ordered by scheduled_for."""

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_user_contact(self, user_id: str) -> Optional[UserContact]:
        ...

    @abstractmethod
    async def save_user_contact(self, contact: UserContact) -> None:
        ...
