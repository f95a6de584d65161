"""
Data Models Package

This package contains all Pydantic models used throughout the application
for data validation and structure.

Models:
- Application lifecycle (status table, applications, history)
- Reminder rules, deadline reminders and reminder jobs
- User contact profiles
- Notifications
"""

from .application_models import (
    APPLICATION_STATUSES,
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    ActorKind,
    Application,
    ApplicationStatus,
    StatusHistoryEntry,
    StatusRule,
    TransitionResult,
    allowed_transitions,
    can_transition,
    parse_status,
)
from .notification_models import Notification, NotificationKind
from .reminder_models import (
    DeadlineReminder,
    JobKind,
    JobStatus,
    NotificationChannel,
    ReminderJob,
    ReminderRule,
)
from .user_models import UserContact

__all__ = [
    'APPLICATION_STATUSES', 'OPEN_STATUSES', 'TERMINAL_STATUSES',
    'ActorKind', 'Application', 'ApplicationStatus', 'StatusHistoryEntry',
    'StatusRule', 'TransitionResult', 'allowed_transitions', 'can_transition',
    'parse_status', 'Notification', 'NotificationKind', 'DeadlineReminder',
    'JobKind', 'JobStatus', 'NotificationChannel', 'ReminderJob',
    'ReminderRule', 'UserContact',
]
