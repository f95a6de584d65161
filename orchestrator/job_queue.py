"""
Job Queue

Host-facing helpers over the persisted job queue: schedule ad-hoc jobs,
cancel pending ones, list what is coming up, and manually resubmit a job
that ended failed or cancelled. Nothing here retries on its own.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from constants import SchedulerConstants
from errors import RecordNotFound
from models.reminder_models import JobKind, JobStatus, ReminderJob
from storage.base_store import BaseStore
from storage.logs_manager import LogsManager, log_message
from utils.date_utils import ensure_aware, utc_now

RESUBMITTABLE_STATUSES = frozenset({JobStatus.FAILED, JobStatus.CANCELLED})

class JobQueue:
    def __init__(self, store: BaseStore, logs_manager: Optional[LogsManager] = None):
        self.store = store
        self.logs_manager = logs_manager

    async def create_job(
        self,
        user_id: str,
        job_type: Union[JobKind, str],
        scheduled_for: datetime,
        data: Optional[Dict[str, Any]] = None,
        application_id: Optional[str] = None,
        program_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ReminderJob:
        job = ReminderJob(
            type=JobKind(job_type),
            user_id=user_id,
            application_id=application_id,
            program_id=program_id,
            scheduled_for=ensure_aware(scheduled_for),
            data=data or {},
            created_at=now or utc_now(),
        )
        await self.store.enqueue_job(job)
        await log_message(
            self.logs_manager, 'debug',
            f"[JobQueue] Scheduled {job.type.value} job {job.id} for {job.scheduled_for.isoformat()}"
        )
        return job

    async def cancel_job(self, job_id: str, now: Optional[datetime] = None) -> bool:
        """Cancel a pending job. Returns False when the job already left `pending`."""
        job = await self._require_job(job_id)
        if job.status != JobStatus.PENDING:
            return False
        await self.store.update_job_status(job_id, JobStatus.CANCELLED, now or utc_now())
        await log_message(self.logs_manager, 'info', f"[JobQueue] Cancelled job {job_id}")
        return True

    async def get_upcoming_jobs(
        self, user_id: str, now: Optional[datetime] = None, days: int = SchedulerConstants.UPCOMING_JOBS_DAYS
    ) -> List[ReminderJob]:
        """Pending jobs of one user scheduled between now and now + days."""
        now = ensure_aware(now or utc_now())
        until = now + timedelta(days=days)
        jobs = await self.store.list_jobs(user_id, JobStatus.PENDING)
        return [job for job in jobs if now <= ensure_aware(job.scheduled_for) <= until]

    async def resubmit_job(self, job_id: str, now: Optional[datetime] = None) -> Optional[ReminderJob]:
        """
        Queue a fresh pending copy of a failed or cancelled job, due at `now`.
        The original row keeps its terminal status. Returns None when the job
        is not in a resubmittable state.
        """
        job = await self._require_job(job_id)
        if job.status not in RESUBMITTABLE_STATUSES:
            return None

        now = now or utc_now()
        copy = ReminderJob(
            type=job.type,
            user_id=job.user_id,
            application_id=job.application_id,
            program_id=job.program_id,
            scheduled_for=now,
            data=dict(job.data),
            created_at=now,
        )
        await self.store.enqueue_job(copy)
        await log_message(self.logs_manager, 'info', f"[JobQueue] Resubmitted job {job_id} as {copy.id}")
        return copy

    async def _require_job(self, job_id: str) -> ReminderJob:
        job = await self.store.get_job(job_id)
        if job is None:
            raise RecordNotFound('reminder_job', job_id)
        return job
