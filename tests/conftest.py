"""
Pytest Configuration and Shared Fixtures

Key Components:
--------------
1. Path Configuration:
   - Puts the project root on the Python path for flat-layout imports

2. Fakes:
   - RecordingDispatcher: in-memory NotificationDispatcher that records every
     call and can be told to fail

3. Data:
   - A fixed "now" so deadline arithmetic is deterministic
   - Seed helpers for applications, rules and contacts

Fixtures:
---------
- now: 2025-03-10 09:00 UTC
- store: empty MemoryStore
- dispatcher: RecordingDispatcher
- test_settings: settings dict rooted in tmp_path

Notes:
------
- Uses pytest-asyncio for async test support (`@pytest.mark.asyncio`)
- Fixtures are synchronous; async tests seed their own data through the
  helpers below
"""

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root directory to Python path (using pathlib)
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root))

from errors import DispatchError
from models.application_models import Application, ApplicationStatus
from models.notification_models import Notification
from models.reminder_models import ReminderRule
from models.user_models import UserContact
from notifications.builders import build_notification
from notifications.dispatcher import NotificationDispatcher
from storage.memory_store import MemoryStore

FIXED_NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)

class RecordingDispatcher(NotificationDispatcher):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    async def dispatch(self, user_id, kind, payload) -> Notification:
        if self.fail:
            raise DispatchError("outbox unavailable")
        self.calls.append((user_id, kind, dict(payload)))
        return build_notification(user_id, kind, payload)

async def seed_application(store, status=ApplicationStatus.DRAFT, days_out=10, user_id='u1', **kwargs):
    application = Application(
        user_id=user_id,
        program_name=kwargs.pop('program_name', 'MSc Data Science'),
        status=status,
        deadline=kwargs.pop('deadline', FIXED_NOW.date() + timedelta(days=days_out)),
        **kwargs,
    )
    await store.save_application(application)
    return application

async def seed_rule(store, thresholds, user_id='u1', channels=('email', 'in_app'), **kwargs):
    rule = ReminderRule(
        user_id=user_id,
        name=kwargs.pop('name', f"{thresholds} day reminder"),
        days_before_deadline=list(thresholds),
        notification_types=list(channels),
        **kwargs,
    )
    await store.save_reminder_rule(rule)
    return rule

async def seed_contact(store, user_id='u1'):
    contact = UserContact(user_id=user_id, email=f"{user_id}@example.com", full_name='Ada Lovelace')
    await store.save_user_contact(contact)
    return contact

@pytest.fixture
def now():
    return FIXED_NOW

@pytest.fixture
def store():
    return MemoryStore()

@pytest.fixture
def dispatcher():
    return RecordingDispatcher()

@pytest.fixture
def test_settings(tmp_path):
    """Settings shaped like config.settings.load_settings() output."""
    return {
        'scheduler': {'interval_seconds': 0.05, 'job_batch_size': 50, 'run_on_start': True},
        'reminders': {'horizon_days': 30},
        'storage': {'backend': 'memory', 'data_dir': str(tmp_path / 'store')},
        'notifications': {'outbox_file': 'notifications.jsonl'},
        'system': {'data_dir': str(tmp_path), 'log_level': 'DEBUG', 'debug_mode': False},
    }

@pytest.fixture
def deadline_in():
    """deadline_in(n) -> the calendar date n days after the fixed now."""
    def _deadline(days: int) -> date:
        return FIXED_NOW.date() + timedelta(days=days)
    return _deadline
