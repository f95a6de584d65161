"""
Reminder & Job Models

Pydantic models for deadline reminders and the persisted job queue:
- ReminderRule: per-user thresholds ("days before deadline") and channels
- DeadlineReminder: proof that (application, threshold) was already raised
- ReminderJob: a unit of deferred dispatch work with a terminal-state lifecycle
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from models.application_models import _new_id, _utc_now

class NotificationChannel(str, Enum):
    EMAIL = "email"
    PUSH = "push"
    IN_APP = "in_app"

class JobKind(str, Enum):
    DEADLINE = "deadline"
    STATUS_UPDATE = "status_update"
    CUSTOM = "custom"

class JobStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"

TERMINAL_JOB_STATUSES = frozenset({JobStatus.SENT, JobStatus.FAILED, JobStatus.CANCELLED})

class ReminderRule(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    name: str
    description: str = ""
    days_before_deadline: List[int] = Field(default_factory=list)
    notification_types: List[NotificationChannel] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @field_validator('days_before_deadline')
    @classmethod
    def _non_negative_thresholds(cls, value: List[int]) -> List[int]:
        if any(days < 0 for days in value):
            raise ValueError("days_before_deadline entries must be >= 0")
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "u123456",
                "name": "Weekly Deadline Reminder",
                "description": "Reminder sent 7 days before application deadline",
                "days_before_deadline": [7],
                "notification_types": ["email", "in_app"],
                "is_active": True,
            }
        }

class DeadlineReminder(BaseModel):
    id: str = Field(default_factory=_new_id)
    application_id: str
    user_id: str
    program_name: str = ""
    deadline: date
    days_until_deadline: int
    created_at: datetime = Field(default_factory=_utc_now)

    @property
    def natural_key(self) -> tuple[str, int]:
        return (self.application_id, self.days_until_deadline)

class ReminderJob(BaseModel):
    id: str = Field(default_factory=_new_id)
    type: JobKind
    user_id: str
    application_id: Optional[str] = None
    program_id: Optional[str] = None
    scheduled_for: datetime
    status: JobStatus = JobStatus.PENDING
    data: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)
    processed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_JOB_STATUSES
