"""
Notification Models

User-visible notifications produced by a NotificationDispatcher.
The engines never build these directly; they hand a kind and an opaque
payload to the dispatcher, which turns them into a Notification.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from models.application_models import _new_id, _utc_now

class NotificationKind(str, Enum):
    STATUS_CHANGED = "status_changed"
    DEADLINE_REMINDER = "deadline_reminder"
    CUSTOM = "custom"

class Notification(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    kind: NotificationKind
    title: str
    message: str
    type: str = "info"          # info | warning | success | error | reminder
    category: str = "general"   # application | deadline | system | general
    action_url: Optional[str] = None
    action_label: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)
    expires_at: Optional[datetime] = None
