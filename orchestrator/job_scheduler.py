"""
Job Scheduler (Async Version)

Runs the periodic tick in a single background asyncio task:
1. ReminderRuleEngine.sweep(now)
2. JobProcessor.drain_due_jobs(now, batch_size)

The loop ticks once right away (unless run_on_start is off) and then every
`interval_seconds`. Ticks are serialized by a lock, so a manual run_tick()
never overlaps the loop. stop() lets an in-flight tick finish.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from constants import Messages, SchedulerConstants
from engines.reminder_engine import ReminderRuleEngine
from orchestrator.job_processor import JobProcessor
from storage.logs_manager import LogsManager, log_message
from utils.date_utils import utc_now

@dataclass
class TickResult:
    started_at: datetime
    reminders_created: int = 0
    jobs_processed: int = 0
    finished_at: Optional[datetime] = None

class JobScheduler:
    def __init__(
        self,
        reminder_engine: ReminderRuleEngine,
        job_processor: JobProcessor,
        interval_seconds: float = SchedulerConstants.TICK_INTERVAL,
        batch_size: int = SchedulerConstants.JOB_BATCH_SIZE,
        logs_manager: Optional[LogsManager] = None,
        clock: Callable[[], datetime] = utc_now,
        run_on_start: bool = True,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self.reminder_engine = reminder_engine
        self.job_processor = job_processor
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self.logs_manager = logs_manager
        self.clock = clock
        self.run_on_start = run_on_start

        self.is_running = False
        self.tick_count = 0
        self.last_tick: Optional[TickResult] = None
        self._tick_lock = asyncio.Lock()
        self._stop_event: Optional[asyncio.Event] = None
        self._loop_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(
        cls,
        settings: dict,
        reminder_engine: ReminderRuleEngine,
        job_processor: JobProcessor,
        logs_manager: Optional[LogsManager] = None,
    ) -> 'JobScheduler':
        scheduler_settings = settings.get('scheduler', {})
        return cls(
            reminder_engine,
            job_processor,
            interval_seconds=scheduler_settings.get('interval_seconds', SchedulerConstants.TICK_INTERVAL),
            batch_size=scheduler_settings.get('job_batch_size', SchedulerConstants.JOB_BATCH_SIZE),
            logs_manager=logs_manager,
            run_on_start=scheduler_settings.get('run_on_start', True),
        )

    async def start(self):
        """Begin ticking in the background."""
        if self.is_running:
            await log_message(self.logs_manager, 'warning', Messages.SCHEDULER_ALREADY_RUNNING)
            return

        self.is_running = True
        self._stop_event = asyncio.Event()
        self._loop_task = asyncio.create_task(self._run_loop())
        await log_message(
            self.logs_manager, 'info', Messages.SCHEDULER_STARTED.format(self.interval_seconds, self.batch_size)
        )

    async def stop(self):
        """Stop scheduling new ticks and wait for the current one to finish."""
        if not self.is_running:
            await log_message(self.logs_manager, 'debug', Messages.SCHEDULER_NOT_RUNNING)
            return

        self.is_running = False
        self._stop_event.set()
        if self._loop_task:
            # an in-flight tick always runs to completion
            await self._loop_task
            self._loop_task = None

        await log_message(self.logs_manager, 'info', Messages.SCHEDULER_STOPPED)

    async def _run_loop(self):
        if self.run_on_start:
            await self.run_tick()

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                await self.run_tick()

    async def run_tick(self, now: Optional[datetime] = None) -> TickResult:
        """Run one sweep + drain. Step failures are logged, never raised."""
        async with self._tick_lock:
            now = now or self.clock()
            result = TickResult(started_at=now)

            try:
                result.reminders_created = await self.reminder_engine.sweep(now)
            except Exception as e:
                await log_message(self.logs_manager, 'error', Messages.TICK_STEP_FAILED.format('sweep', e))

            try:
                result.jobs_processed = await self.job_processor.drain_due_jobs(now, self.batch_size)
            except Exception as e:
                await log_message(self.logs_manager, 'error', Messages.TICK_STEP_FAILED.format('drain', e))

            result.finished_at = self.clock()
            self.tick_count += 1
            self.last_tick = result
            await log_message(
                self.logs_manager, 'info',
                Messages.TICK_COMPLETED.format(self.tick_count, result.reminders_created, result.jobs_processed)
            )
            return result

    def get_status(self) -> Dict[str, Any]:
        return {
            'is_running': self.is_running,
            'interval_seconds': self.interval_seconds,
            'batch_size': self.batch_size,
            'tick_count': self.tick_count,
            'last_tick_at': self.last_tick.started_at if self.last_tick else None,
            'last_tick': self.last_tick,
        }
