"""
Orchestrator Package

Components that run the deferred side of the tracker.

Components:
- JobScheduler: periodic sweep + drain in a background asyncio task
- JobProcessor: drains due reminder jobs into the notification dispatcher
- JobQueue: manual scheduling, cancellation and resubmission of jobs
"""

from .job_processor import JobProcessor
from .job_queue import JobQueue
from .job_scheduler import JobScheduler, TickResult

__all__ = ['JobProcessor', 'JobQueue', 'JobScheduler', 'TickResult']
