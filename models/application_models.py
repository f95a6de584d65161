"""
Application Status Models

Pydantic models for the application lifecycle:
- ApplicationStatus: the closed set of lifecycle states
- StatusRule / APPLICATION_STATUSES: the static transition table, keyed by
  status. Legality checks are a lookup in this table and nothing else.
- Application and StatusHistoryEntry records as exchanged with the store
"""

from datetime import date, datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union
import uuid

from pydantic import BaseModel, ConfigDict, Field

from errors import UnknownActor, UnknownStatus

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

def _new_id() -> str:
    return uuid.uuid4().hex

class ApplicationStatus(str, Enum):
    PLANNING = "planning"
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WAITLISTED = "waitlisted"
    DEFERRED = "deferred"
    WITHDRAWN = "withdrawn"
    CANCELLED = "cancelled"

class ActorKind(str, Enum):
    USER = "user"
    SYSTEM = "system"
    EXTERNAL_AUTHORITY = "external_authority"

class StatusRule(BaseModel):
    """Presentation hints and allowed next states for one status."""

    model_config = ConfigDict(frozen=True)

    label: str
    description: str
    color: str
    bg_color: str
    icon: str
    can_transition_to: frozenset[ApplicationStatus] = frozenset()

    @property
    def is_terminal(self) -> bool:
        return not self.can_transition_to

S = ApplicationStatus

APPLICATION_STATUSES: Mapping[ApplicationStatus, StatusRule] = MappingProxyType({
    S.PLANNING: StatusRule(
        label='Planning',
        description='Application is being planned and prepared',
        color='text-gray-600', bg_color='bg-gray-100', icon='clipboard',
        can_transition_to=frozenset({S.DRAFT, S.CANCELLED}),
    ),
    S.DRAFT: StatusRule(
        label='Draft',
        description='Application is being drafted',
        color='text-yellow-600', bg_color='bg-yellow-100', icon='pencil',
        can_transition_to=frozenset({S.SUBMITTED, S.PLANNING, S.CANCELLED}),
    ),
    S.SUBMITTED: StatusRule(
        label='Submitted',
        description='Application has been submitted to the university',
        color='text-blue-600', bg_color='bg-blue-100', icon='outbox',
        can_transition_to=frozenset({S.UNDER_REVIEW, S.WITHDRAWN}),
    ),
    S.UNDER_REVIEW: StatusRule(
        label='Under Review',
        description='Application is being reviewed by the university',
        color='text-purple-600', bg_color='bg-purple-100', icon='magnifier',
        can_transition_to=frozenset({S.ACCEPTED, S.REJECTED, S.WAITLISTED, S.DEFERRED, S.WITHDRAWN}),
    ),
    S.ACCEPTED: StatusRule(
        label='Accepted',
        description='Application has been accepted by the university',
        color='text-green-600', bg_color='bg-green-100', icon='party',
        can_transition_to=frozenset({S.WITHDRAWN}),
    ),
    S.REJECTED: StatusRule(
        label='Rejected',
        description='Application has been rejected by the university',
        color='text-red-600', bg_color='bg-red-100', icon='cross',
    ),
    S.WAITLISTED: StatusRule(
        label='Waitlisted',
        description='Application is on the waitlist',
        color='text-orange-600', bg_color='bg-orange-100', icon='hourglass',
        can_transition_to=frozenset({S.ACCEPTED, S.REJECTED, S.WITHDRAWN}),
    ),
    S.DEFERRED: StatusRule(
        label='Deferred',
        description='Application has been deferred to the next intake',
        color='text-indigo-600', bg_color='bg-indigo-100', icon='next',
        can_transition_to=frozenset({S.ACCEPTED, S.REJECTED, S.WITHDRAWN}),
    ),
    S.WITHDRAWN: StatusRule(
        label='Withdrawn',
        description='Application has been withdrawn by the student',
        color='text-gray-600', bg_color='bg-gray-100', icon='return',
    ),
    S.CANCELLED: StatusRule(
        label='Cancelled',
        description='Application has been cancelled',
        color='text-gray-600', bg_color='bg-gray-100', icon='stop',
    ),
})

# Statuses that still receive deadline reminders
OPEN_STATUSES = frozenset({S.PLANNING, S.DRAFT, S.SUBMITTED, S.UNDER_REVIEW})

TERMINAL_STATUSES = frozenset(s for s, rule in APPLICATION_STATUSES.items() if rule.is_terminal)

def parse_status(value: Union[ApplicationStatus, str]) -> ApplicationStatus:
    """Coerce a status value, raising UnknownStatus for anything outside the enum."""
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(value)
    except ValueError:
        raise UnknownStatus(value) from None

def parse_actor(value: Union[ActorKind, str]) -> ActorKind:
    if isinstance(value, ActorKind):
        return value
    try:
        return ActorKind(value)
    except ValueError:
        raise UnknownActor(value) from None

def allowed_transitions(status: Union[ApplicationStatus, str]) -> frozenset[ApplicationStatus]:
    return APPLICATION_STATUSES[parse_status(status)].can_transition_to

def can_transition(from_status: Union[ApplicationStatus, str], to_status: Union[ApplicationStatus, str]) -> bool:
    return parse_status(to_status) in allowed_transitions(from_status)

class Application(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    program_id: Optional[str] = None
    program_name: str = ""
    status: ApplicationStatus = ApplicationStatus.PLANNING
    deadline: date
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "a123456",
                "user_id": "u123456",
                "program_id": "p42",
                "program_name": "MSc Data Science",
                "status": "draft",
                "deadline": "2025-01-15",
            }
        }

class StatusHistoryEntry(BaseModel):
    """Append-only record of one successful transition."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    application_id: str
    status: ApplicationStatus
    updated_by: ActorKind = ActorKind.USER
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now)

class TransitionResult(BaseModel):
    application_id: str
    old_status: ApplicationStatus
    new_status: ApplicationStatus
    history_entry: StatusHistoryEntry
    notified: bool = False
