"""
Job Processor

Drains due ReminderJobs from the store, one at a time, oldest first.
Each job ends in a terminal state:
- sent: its recipe completed
- failed: its recipe raised (logged, never retried automatically)

Recipes are looked up by job kind. `deadline` jobs resolve the owner's
contact and dispatch a deadline_reminder notification; `status_update` and
`custom` jobs have no delivery recipe yet and are logged and marked sent.
"""

from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

from constants import Messages, SchedulerConstants
from errors import UserNotFound
from models.notification_models import NotificationKind
from models.reminder_models import JobKind, JobStatus, ReminderJob
from notifications.dispatcher import NotificationDispatcher
from storage.base_store import BaseStore
from storage.logs_manager import LogsManager, log_message
from utils.date_utils import utc_now

class JobProcessor:
    def __init__(
        self,
        store: BaseStore,
        dispatcher: NotificationDispatcher,
        logs_manager: Optional[LogsManager] = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.logs_manager = logs_manager
        self._recipes: Dict[JobKind, Callable[[ReminderJob], Awaitable[None]]] = {
            JobKind.DEADLINE: self._process_deadline_job,
            JobKind.STATUS_UPDATE: self._process_placeholder_job,
            JobKind.CUSTOM: self._process_placeholder_job,
        }

    async def drain_due_jobs(
        self, now: Optional[datetime] = None, limit: int = SchedulerConstants.JOB_BATCH_SIZE
    ) -> int:
        """
        Process up to `limit` pending jobs scheduled at or before `now`.

        Returns:
            int: number of jobs driven to `sent` or `failed`
        """
        now = now or utc_now()
        jobs = await self.store.fetch_due_jobs(now, limit)
        sent = failed = 0

        for job in jobs:
            try:
                await self.process_job(job)
            except Exception as e:
                await log_message(self.logs_manager, 'error', Messages.JOB_FAILED.format(job.id, job.type.value, e))
                if await self._mark(job, JobStatus.FAILED, now):
                    failed += 1
                continue

            await log_message(self.logs_manager, 'debug', Messages.JOB_SENT.format(job.id, job.type.value))
            if await self._mark(job, JobStatus.SENT, now):
                sent += 1

        if jobs:
            await log_message(self.logs_manager, 'info', Messages.DRAIN_COMPLETED.format(len(jobs), sent, failed))
        return sent + failed

    async def process_job(self, job: ReminderJob) -> None:
        """Run the recipe for a single job. Raises when the job cannot be delivered."""
        recipe = self._recipes.get(job.type, self._process_placeholder_job)
        await recipe(job)

    async def _mark(self, job: ReminderJob, status: JobStatus, now: datetime) -> bool:
        try:
            await self.store.update_job_status(job.id, status, now)
            return True
        except Exception as e:
            await log_message(
                self.logs_manager, 'error', Messages.JOB_STATUS_UPDATE_FAILED.format(status.value, job.id, e)
            )
            return False

    async def _process_deadline_job(self, job: ReminderJob) -> None:
        contact = await self.store.get_user_contact(job.user_id)
        if contact is None:
            raise UserNotFound(job.user_id)

        payload = dict(job.data)
        payload.setdefault('application_id', job.application_id)
        payload['email'] = contact.email
        payload['full_name'] = contact.full_name
        await self.dispatcher.dispatch(job.user_id, NotificationKind.DEADLINE_REMINDER, payload)

    async def _process_placeholder_job(self, job: ReminderJob) -> None:
        await log_message(self.logs_manager, 'info', Messages.JOB_PLACEHOLDER.format(job.type.value, job.id))
