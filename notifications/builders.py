"""
Notification Builders

Turn a (kind, payload) dispatch request into a user-visible Notification.
Payload keys are the ones the engines put on the wire:
- status_changed: application_id, program_name, old_status, new_status
- deadline_reminder: application_id, program_name, deadline, days_until_deadline
"""

from datetime import date, datetime, time, timezone
from typing import Any, Dict

from models.notification_models import Notification, NotificationKind

STATUS_MESSAGES = {
    'submitted': 'Your application has been submitted successfully!',
    'under_review': 'Your application is now under review.',
    'accepted': 'Congratulations! You have been accepted!',
    'rejected': 'Unfortunately, your application was not successful this time.',
    'waitlisted': 'You have been placed on the waitlist.',
    'deferred': 'Your application has been deferred to the next intake.',
}

def deadline_urgency(days_until_deadline: int) -> str:
    if days_until_deadline <= 3:
        return 'urgent'
    if days_until_deadline <= 7:
        return 'warning'
    return 'info'

def build_status_notification(user_id: str, payload: Dict[str, Any]) -> Notification:
    program_name = payload.get('program_name') or 'your application'
    new_status = payload.get('new_status', '')
    if new_status == 'accepted':
        kind_type = 'success'
    elif new_status == 'rejected':
        kind_type = 'error'
    else:
        kind_type = 'info'

    application_id = payload.get('application_id')
    return Notification(
        user_id=user_id,
        kind=NotificationKind.STATUS_CHANGED,
        title=f"Application Update: {program_name}",
        message=STATUS_MESSAGES.get(new_status, f"Your application status has changed to {new_status}."),
        type=kind_type,
        category='application',
        action_url=f"/applications/{application_id}" if application_id else None,
        action_label='View Application',
        metadata=dict(payload),
    )

def build_deadline_notification(user_id: str, payload: Dict[str, Any]) -> Notification:
    program_name = payload.get('program_name') or 'your application'
    days = int(payload.get('days_until_deadline', 0))

    if days <= 1:
        title = f"Application deadline TODAY: {program_name}"
        message = f"Your application for {program_name} is due TODAY! Don't miss this opportunity."
        kind_type = 'error'
    else:
        title = f"Application deadline in {days} days: {program_name}"
        message = (
            f"Your application for {program_name} is due in {days} days. "
            "Make sure you have all required documents ready."
        )
        kind_type = 'warning' if days <= 3 else 'reminder'

    expires_at = None
    deadline = payload.get('deadline')
    if deadline:
        # Notification disappears once the deadline day starts
        expires_at = datetime.combine(date.fromisoformat(str(deadline)), time.min, tzinfo=timezone.utc)

    application_id = payload.get('application_id')
    return Notification(
        user_id=user_id,
        kind=NotificationKind.DEADLINE_REMINDER,
        title=title,
        message=message,
        type=kind_type,
        category='deadline',
        action_url=f"/applications/{application_id}" if application_id else None,
        action_label='View Application',
        metadata={**payload, 'urgency': deadline_urgency(days)},
        expires_at=expires_at,
    )

def build_custom_notification(user_id: str, payload: Dict[str, Any]) -> Notification:
    return Notification(
        user_id=user_id,
        kind=NotificationKind.CUSTOM,
        title=payload.get('title', 'Notification'),
        message=payload.get('message', ''),
        type=payload.get('type', 'info'),
        category='system',
        metadata=dict(payload),
    )

BUILDERS = {
    NotificationKind.STATUS_CHANGED: build_status_notification,
    NotificationKind.DEADLINE_REMINDER: build_deadline_notification,
    NotificationKind.CUSTOM: build_custom_notification,
}

def build_notification(user_id: str, kind: NotificationKind, payload: Dict[str, Any]) -> Notification:
    return BUILDERS[NotificationKind(kind)](user_id, payload)
