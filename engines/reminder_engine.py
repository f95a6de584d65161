"""
Reminder Rule Engine

One sweep evaluates every open application with a deadline inside the
look-ahead horizon against its owner's active reminder rules:
- days until deadline is counted in whole calendar days
- a rule fires only on an exact threshold match
- each (application, threshold) pair is raised at most once; the store's
  natural key is the authoritative guard, reminder_exists() only skips work
- every new DeadlineReminder is followed by one pending `deadline` job

A failure on one application is logged and the sweep moves on.
"""

from datetime import datetime
from typing import Dict, List, Optional

from constants import Messages, ReminderDefaults, SchedulerConstants
from errors import DuplicateReminderError, RecordNotFound
from models.application_models import OPEN_STATUSES, Application
from models.reminder_models import (
    DeadlineReminder,
    JobKind,
    NotificationChannel,
    ReminderJob,
    ReminderRule,
)
from storage.base_store import BaseStore
from storage.logs_manager import LogsManager, log_message
from utils.date_utils import days_until_deadline, horizon_cutoff, utc_now

class ReminderRuleEngine:
    def __init__(
        self,
        store: BaseStore,
        horizon_days: int = SchedulerConstants.REMINDER_HORIZON_DAYS,
        logs_manager: Optional[LogsManager] = None,
    ):
        self.store = store
        self.horizon_days = horizon_days
        self.logs_manager = logs_manager

    async def sweep(self, now: Optional[datetime] = None) -> int:
        """Create the reminders and deadline jobs due at `now`. Returns the number of reminders created."""
        now = now or utc_now()
        cutoff = horizon_cutoff(now, self.horizon_days)
        await log_message(self.logs_manager, 'debug', Messages.SWEEP_STARTED.format(self.horizon_days, cutoff))

        candidates = await self.store.list_open_applications_with_deadline_before(cutoff)
        rules_by_user: Dict[str, List[ReminderRule]] = {}
        created = 0

        for application in candidates:
            try:
                if application.status not in OPEN_STATUSES:
                    continue
                days = days_until_deadline(application.deadline, now)
                if days < 0:
                    continue
                if application.user_id not in rules_by_user:
                    rules_by_user[application.user_id] = await self.store.get_active_reminder_rules(
                        application.user_id
                    )
                created += await self._evaluate(application, days, rules_by_user[application.user_id], now)
            except Exception as e:
                await log_message(self.logs_manager, 'error', Messages.SWEEP_ITEM_FAILED.format(application.id, e))

        await log_message(self.logs_manager, 'info', Messages.SWEEP_COMPLETED.format(len(candidates), created))
        return created

    async def _evaluate(self, application: Application, days: int, rules: List[ReminderRule], now: datetime) -> int:
        created = 0
        for rule in rules:
            for threshold in rule.days_before_deadline:
                if threshold != days:
                    continue
                if await self.store.reminder_exists(application.id, threshold):
                    continue

                reminder = DeadlineReminder(
                    application_id=application.id,
                    user_id=application.user_id,
                    program_name=application.program_name,
                    deadline=application.deadline,
                    days_until_deadline=threshold,
                    created_at=now,
                )
                try:
                    await self.store.insert_deadline_reminder(reminder)
                except DuplicateReminderError:
                    await log_message(
                        self.logs_manager, 'debug', Messages.REMINDER_DUPLICATE.format(application.id, threshold)
                    )
                    continue

                created += 1
                await log_message(self.logs_manager, 'info', Messages.REMINDER_CREATED.format(application.id, threshold))

                try:
                    await self.store.enqueue_job(self._deadline_job(application, rule, threshold, now))
                except Exception as e:
                    await log_message(self.logs_manager, 'error', Messages.JOB_ENQUEUE_FAILED.format(application.id, e))
        return created

    @staticmethod
    def _deadline_job(application: Application, rule: ReminderRule, threshold: int, now: datetime) -> ReminderJob:
        channels = [channel.value for channel in rule.notification_types]
        return ReminderJob(
            type=JobKind.DEADLINE,
            user_id=application.user_id,
            application_id=application.id,
            program_id=application.program_id,
            scheduled_for=now,
            data={
                'application_id': application.id,
                'program_name': application.program_name,
                'deadline': application.deadline.isoformat(),
                'days_until_deadline': threshold,
                'notification_types': channels,
                'reminder_type': (
                    NotificationChannel.EMAIL.value
                    if NotificationChannel.EMAIL.value in channels or not channels
                    else channels[0]
                ),
                'rule_id': rule.id,
            },
            created_at=now,
        )

    # -------------------------------------------------------------------------
    # Rule management
    # -------------------------------------------------------------------------

    async def create_default_rules(self, user_id: str) -> List[ReminderRule]:
        """Give a new account the standard 1/3/7/30-day reminders."""
        rules = [ReminderRule(user_id=user_id, **defaults) for defaults in ReminderDefaults.RULES]
        for rule in rules:
            await self.store.save_reminder_rule(rule)
        return rules

    async def get_user_rules(self, user_id: str, active_only: bool = True) -> List[ReminderRule]:
        if active_only:
            rules = await self.store.get_active_reminder_rules(user_id)
        else:
            rules = await self.store.list_reminder_rules(user_id)
        return sorted(rules, key=lambda rule: min(rule.days_before_deadline, default=0))

    async def disable_rule(self, rule_id: str, now: Optional[datetime] = None) -> ReminderRule:
        """Soft-disable a rule through its active flag."""
        rule = await self.store.get_reminder_rule(rule_id)
        if rule is None:
            raise RecordNotFound('reminder_rule', rule_id)
        updated = rule.model_copy(update={'is_active': False, 'updated_at': now or utc_now()})
        await self.store.save_reminder_rule(updated)
        return updated
