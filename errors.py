"""
Error Types

Exception hierarchy shared by the store backends, the engines and the
scheduler. Validation and not-found errors are raised synchronously to the
caller of StatusTransitionEngine; store and dispatch errors raised inside a
sweep or drain are caught per item and logged.
"""

class TrackerError(Exception):
    """Base class for all deadline tracker errors."""


class TransitionValidationError(TrackerError):
    """A requested status change was rejected before any write happened."""


class InvalidTransition(TransitionValidationError):
    def __init__(self, application_id: str, current_status, attempted_status):
        self.application_id = application_id
        self.current_status = current_status
        self.attempted_status = attempted_status
        current = getattr(current_status, 'value', current_status)
        attempted = getattr(attempted_status, 'value', attempted_status)
        super().__init__(
            f"Invalid status transition for application {application_id}: "
            f"{current} -> {attempted}"
        )


class UnknownStatus(TransitionValidationError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Unknown application status: {value!r}")


class UnknownActor(TransitionValidationError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Unknown actor kind: {value!r}")


class ApplicationNotFound(TrackerError):
    def __init__(self, application_id: str):
        self.application_id = application_id
        super().__init__(f"Application not found: {application_id}")


class UserNotFound(TrackerError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class StoreError(TrackerError):
    """Any failure reported by a persistence backend."""


class StoreWriteFailed(StoreError):
    """A write required by a status transition could not be persisted."""


class RecordNotFound(StoreError):
    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} not found: {record_id}")


class DuplicateReminderError(StoreError):
    def __init__(self, application_id: str, days_until_deadline: int):
        self.application_id = application_id
        self.days_until_deadline = days_until_deadline
        super().__init__(
            f"Deadline reminder already exists for application {application_id} "
            f"at {days_until_deadline} days"
        )


class DispatchError(TrackerError):
    """The notification dispatcher could not deliver a notification."""
