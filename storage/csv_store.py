"""
CSV Store Module

BaseStore implementation on top of pandas, one CSV file per entity under
`data_dir`:
- Append-only writing for history rows, reminders and new jobs
- Read-modify-write of the whole file for status updates
- List and dict columns are stored as JSON strings
- Every read-modify-write runs under one asyncio.Lock, which also makes the
  reminder natural-key check and the insert a single step
- File and parse failures surface as StoreError
"""

import asyncio
import json
from contextlib import asynccontextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Type

import pandas as pd
from pydantic import BaseModel

from errors import DuplicateReminderError, RecordNotFound, StoreError
from models.application_models import OPEN_STATUSES, Application, ApplicationStatus, StatusHistoryEntry
from models.reminder_models import DeadlineReminder, JobStatus, ReminderJob, ReminderRule
from models.user_models import UserContact
from storage.base_store import BaseStore
from utils.date_utils import ensure_aware

TABLE_COLUMNS: Dict[str, List[str]] = {
    'applications': [
        'id', 'user_id', 'program_id', 'program_name', 'status',
        'deadline', 'created_at', 'updated_at'
    ],
    'status_history': ['id', 'application_id', 'status', 'updated_by', 'notes', 'created_at'],
    'reminder_rules': [
        'id', 'user_id', 'name', 'description', 'days_before_deadline',
        'notification_types', 'is_active', 'created_at', 'updated_at'
    ],
    'deadline_reminders': [
        'id', 'application_id', 'user_id', 'program_name', 'deadline',
        'days_until_deadline', 'created_at'
    ],
    'reminder_jobs': [
        'id', 'type', 'user_id', 'application_id', 'program_id', 'scheduled_for',
        'status', 'data', 'created_at', 'processed_at'
    ],
    'user_contacts': ['user_id', 'email', 'full_name'],
}

JSON_COLUMNS = {'days_before_deadline', 'notification_types', 'data'}

class CSVStore(BaseStore):
    def __init__(self, settings):
        """
        Args:
            settings (dict): Must include 'data_dir' for CSV storage location.
        """
        self.data_dir = Path(settings['data_dir'])
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # File helpers
    # -------------------------------------------------------------------------

    def _path(self, table: str) -> Path:
        return self.data_dir / f"{table}.csv"

    def _load(self, table: str) -> pd.DataFrame:
        """Load a table as strings. Missing files yield an empty frame with the right columns."""
        path = self._path(table)
        if not path.exists():
            return pd.DataFrame(columns=TABLE_COLUMNS[table], dtype=str)
        try:
            return pd.read_csv(path, dtype=str, keep_default_na=False)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise StoreError(f"Could not read {path.name}: {e}") from e

    @asynccontextmanager
    async def _writing(self, table: str):
        """Hold the write lock and report file failures on `table` as StoreError."""
        async with self._lock:
            try:
                yield
            except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
                raise StoreError(f"Could not write {table}.csv: {e}") from e

    def _write(self, table: str, df: pd.DataFrame) -> None:
        df.to_csv(self._path(table), index=False)

    def _append(self, table: str, model: BaseModel) -> None:
        path = self._path(table)
        df = pd.DataFrame([self._to_row(model)], columns=TABLE_COLUMNS[table])
        df.to_csv(path, mode='a', header=not path.exists(), index=False)

    @staticmethod
    def _to_row(model: BaseModel) -> dict:
        row = model.model_dump(mode='json')
        for key, value in row.items():
            if key in JSON_COLUMNS:
                row[key] = json.dumps(value)
            elif isinstance(value, bool):
                row[key] = 'true' if value else 'false'
            elif value is None:
                row[key] = ''
        return row

    @staticmethod
    def _from_row(row: dict, model_cls: Type[BaseModel]):
        data = {}
        for key, value in row.items():
            if value == '':
                continue  # let the model default apply
            data[key] = json.loads(value) if key in JSON_COLUMNS else value
        return model_cls.model_validate(data)

    def _models(self, df: pd.DataFrame, model_cls: Type[BaseModel]) -> list:
        return [self._from_row(row, model_cls) for row in df.to_dict('records')]

    def _upsert(self, table: str, key: str, model: BaseModel) -> None:
        df = self._load(table)
        row = self._to_row(model)
        df = df[df[key] != row[key]]
        df = pd.concat([df, pd.DataFrame([row], columns=TABLE_COLUMNS[table])], ignore_index=True)
        self._write(table, df)

    def _update_where(self, table: str, entity: str, record_id: str, values: dict) -> None:
        df = self._load(table)
        mask = df['id'] == record_id
        if not mask.any():
            raise RecordNotFound(entity, record_id)
        for column, value in values.items():
            df.loc[mask, column] = value
        self._write(table, df)

    # -------------------------------------------------------------------------
    # Applications & history
    # -------------------------------------------------------------------------

    async def get_application(self, application_id: str) -> Optional[Application]:
        df = self._load('applications')
        matches = self._models(df[df['id'] == application_id], Application)
        return matches[0] if matches else None

    async def update_application_status(
        self, application_id: str, status: ApplicationStatus, updated_at: datetime
    ) -> None:
        async with self._writing('applications'):
            self._update_where('applications', 'application', application_id, {
                'status': ApplicationStatus(status).value,
                'updated_at': ensure_aware(updated_at).isoformat(),
            })

    async def append_status_history(self, entry: StatusHistoryEntry) -> None:
        async with self._writing('status_history'):
            self._append('status_history', entry)

    async def list_open_applications_with_deadline_before(self, cutoff: date) -> List[Application]:
        df = self._load('applications')
        df = df[df['status'].isin([s.value for s in OPEN_STATUSES])]
        return [app for app in self._models(df, Application) if app.deadline <= cutoff]

    async def save_application(self, application: Application) -> None:
        async with self._writing('applications'):
            self._upsert('applications', 'id', application)

    async def list_applications(self, user_id: str) -> List[Application]:
        df = self._load('applications')
        return self._models(df[df['user_id'] == user_id], Application)

    async def list_status_history(self, application_id: str) -> List[StatusHistoryEntry]:
        df = self._load('status_history')
        return self._models(df[df['application_id'] == application_id], StatusHistoryEntry)

    # -------------------------------------------------------------------------
    # Reminder rules & deadline reminders
    # -------------------------------------------------------------------------

    async def get_active_reminder_rules(self, user_id: str) -> List[ReminderRule]:
        return [rule for rule in await self.list_reminder_rules(user_id) if rule.is_active]

    async def list_reminder_rules(self, user_id: str) -> List[ReminderRule]:
        df = self._load('reminder_rules')
        return self._models(df[df['user_id'] == user_id], ReminderRule)

    async def get_reminder_rule(self, rule_id: str) -> Optional[ReminderRule]:
        df = self._load('reminder_rules')
        matches = self._models(df[df['id'] == rule_id], ReminderRule)
        return matches[0] if matches else None

    async def save_reminder_rule(self, rule: ReminderRule) -> None:
        async with self._writing('reminder_rules'):
            self._upsert('reminder_rules', 'id', rule)

    def _has_reminder(self, application_id: str, days_until_deadline: int) -> bool:
        df = self._load('deadline_reminders')
        mask = (df['application_id'] == application_id) & (df['days_until_deadline'] == str(days_until_deadline))
        return bool(mask.any())

    async def reminder_exists(self, application_id: str, days_until_deadline: int) -> bool:
        return self._has_reminder(application_id, days_until_deadline)

    async def insert_deadline_reminder(self, reminder: DeadlineReminder) -> None:
        async with self._writing('deadline_reminders'):
            if self._has_reminder(reminder.application_id, reminder.days_until_deadline):
                raise DuplicateReminderError(reminder.application_id, reminder.days_until_deadline)
            self._append('deadline_reminders', reminder)

    # -------------------------------------------------------------------------
    # Jobs
    # -------------------------------------------------------------------------

    async def enqueue_job(self, job: ReminderJob) -> None:
        async with self._writing('reminder_jobs'):
            self._append('reminder_jobs', job)

    async def fetch_due_jobs(self, now: datetime, limit: int) -> List[ReminderJob]:
        now = ensure_aware(now)
        df = self._load('reminder_jobs')
        pending = self._models(df[df['status'] == JobStatus.PENDING.value], ReminderJob)
        due = [job for job in pending if ensure_aware(job.scheduled_for) <= now]
        due.sort(key=lambda job: ensure_aware(job.scheduled_for))
        return due[:limit]

    async def update_job_status(
        self, job_id: str, status: JobStatus, processed_at: Optional[datetime]
    ) -> None:
        async with self._writing('reminder_jobs'):
            self._update_where('reminder_jobs', 'reminder_job', job_id, {
                'status': JobStatus(status).value,
                'processed_at': ensure_aware(processed_at).isoformat() if processed_at else '',
            })

    async def get_job(self, job_id: str) -> Optional[ReminderJob]:
        df = self._load('reminder_jobs')
        matches = self._models(df[df['id'] == job_id], ReminderJob)
        return matches[0] if matches else None

    async def list_jobs(self, user_id: str, status: Optional[JobStatus] = None) -> List[ReminderJob]:
        df = self._load('reminder_jobs')
        df = df[df['user_id'] == user_id]
        if status is not None:
            df = df[df['status'] == JobStatus(status).value]
        jobs = self._models(df, ReminderJob)
        jobs.sort(key=lambda job: ensure_aware(job.scheduled_for))
        return jobs

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def get_user_contact(self, user_id: str) -> Optional[UserContact]:
        df = self._load('user_contacts')
        matches = self._models(df[df['user_id'] == user_id], UserContact)
        return matches[0] if matches else None

    async def save_user_contact(self, contact: UserContact) -> None:
        async with self._writing('user_contacts'):
            self._upsert('user_contacts', 'user_id', contact)
