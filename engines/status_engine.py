"""
Status Transition Engine

Validates and applies a single application's status change:
1. Look up the current status in APPLICATION_STATUSES
2. Persist the new status, then append a StatusHistoryEntry
3. Ask the dispatcher to notify the owning user

Rejected requests (unknown status, missing application, illegal or no-op
transition) raise before any write. Notification is best-effort: a dispatcher
failure is logged and reported on the result, never rolled back into the
stored status.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Union

from constants import Messages, SchedulerConstants
from errors import ApplicationNotFound, InvalidTransition, StoreError, StoreWriteFailed, TrackerError
from models.application_models import (
    APPLICATION_STATUSES,
    OPEN_STATUSES,
    ActorKind,
    Application,
    ApplicationStatus,
    StatusHistoryEntry,
    TransitionResult,
    parse_actor,
    parse_status,
)
from models.notification_models import NotificationKind
from notifications.dispatcher import NotificationDispatcher
from storage.base_store import BaseStore
from storage.logs_manager import LogsManager, log_message
from utils.date_utils import as_date, utc_now

class StatusTransitionEngine:
    def __init__(
        self,
        store: BaseStore,
        dispatcher: NotificationDispatcher,
        logs_manager: Optional[LogsManager] = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.logs_manager = logs_manager

    async def transition(
        self,
        application_id: str,
        target_status: Union[ApplicationStatus, str],
        actor: ActorKind = ActorKind.USER,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        """
        Move an application to `target_status`.

        Raises:
            UnknownStatus: target_status is not an ApplicationStatus value
            UnknownActor: actor is not an ActorKind value
            ApplicationNotFound: no application with that id
            InvalidTransition: target is the current status or not allowed from it
            StoreWriteFailed: the status update or the history append failed
        """
        target = parse_status(target_status)
        actor = parse_actor(actor)
        now = now or utc_now()

        application = await self.store.get_application(application_id)
        if application is None:
            raise ApplicationNotFound(application_id)

        current = application.status
        if target == current or target not in APPLICATION_STATUSES[current].can_transition_to:
            error = InvalidTransition(application_id, current, target)
            await log_message(self.logs_manager, 'warning', Messages.TRANSITION_REJECTED.format(application_id, error))
            raise error

        entry = StatusHistoryEntry(
            application_id=application_id,
            status=target,
            updated_by=actor,
            notes=note,
            created_at=now,
        )
        try:
            await self.store.update_application_status(application_id, target, now)
            await self.store.append_status_history(entry)
        except StoreError as e:
            raise StoreWriteFailed(f"Could not persist transition for application {application_id}: {e}") from e

        await log_message(
            self.logs_manager, 'info',
            Messages.TRANSITION_APPLIED.format(application_id, current.value, target.value)
        )

        notified = False
        if current != target:
            notified = await self._notify_status_change(application, current, target)

        return TransitionResult(
            application_id=application_id,
            old_status=current,
            new_status=target,
            history_entry=entry,
            notified=notified,
        )

    async def _notify_status_change(
        self, application: Application, old_status: ApplicationStatus, new_status: ApplicationStatus
    ) -> bool:
        payload = {
            'application_id': application.id,
            'program_name': application.program_name,
            'old_status': old_status.value,
            'new_status': new_status.value,
        }
        try:
            await self.dispatcher.dispatch(application.user_id, NotificationKind.STATUS_CHANGED, payload)
            return True
        except Exception as e:
            await log_message(self.logs_manager, 'error', Messages.NOTIFY_FAILED.format(application.id, e))
            return False

    async def bulk_transition(
        self,
        application_ids: List[str],
        target_status: Union[ApplicationStatus, str],
        actor: ActorKind = ActorKind.USER,
        note: Optional[str] = None,
    ) -> Dict[str, List[str]]:
        """
        Apply the same transition to many applications; one failure does not stop the rest.

        An unknown target status or actor raises before any application is touched.
        """
        target = parse_status(target_status)
        actor = parse_actor(actor)
        results = {'success': [], 'failed': []}
        for application_id in application_ids:
            try:
                await self.transition(application_id, target, actor=actor, note=note)
                results['success'].append(application_id)
            except TrackerError:
                results['failed'].append(application_id)
        return results

    async def get_status_history(self, application_id: str, newest_first: bool = False) -> List[StatusHistoryEntry]:
        history = await self.store.list_status_history(application_id)
        return list(reversed(history)) if newest_first else history

    async def get_status_stats(self, user_id: str) -> Dict[ApplicationStatus, int]:
        stats = {status: 0 for status in ApplicationStatus}
        for application in await self.store.list_applications(user_id):
            stats[application.status] += 1
        return stats

    async def get_applications_requiring_attention(self, user_id: str) -> List[Application]:
        """Open applications of one user, nearest deadline first."""
        applications = await self.store.list_applications(user_id)
        open_apps = [app for app in applications if app.status in OPEN_STATUSES]
        return sorted(open_apps, key=lambda app: app.deadline)

    async def get_applications_by_status(
        self, user_id: str, status: Union[ApplicationStatus, str]
    ) -> List[Application]:
        """Applications of one user in `status`, most recently created first."""
        status = parse_status(status)
        applications = await self.store.list_applications(user_id)
        matching = [app for app in applications if app.status == status]
        return sorted(matching, key=lambda app: app.created_at, reverse=True)

    async def check_approaching_deadlines(
        self,
        user_id: str,
        now: Optional[datetime] = None,
        days: int = SchedulerConstants.APPROACHING_DEADLINE_DAYS,
    ) -> List[Application]:
        """Planning and draft applications due between today and `days` from now, soonest first."""
        today = as_date(now or utc_now())
        cutoff = today + timedelta(days=days)
        applications = await self.store.list_applications(user_id)
        approaching = [
            app for app in applications
            if app.status in (ApplicationStatus.PLANNING, ApplicationStatus.DRAFT)
            and today <= app.deadline <= cutoff
        ]
        return sorted(approaching, key=lambda app: app.deadline)
