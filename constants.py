"""
Global Constants Module

Contains the scheduling defaults and standardized log messages used across the
engines and the scheduler. Serves as the single source of truth for timing and
batching configuration; `config.settings` falls back to these values when the
corresponding environment variables are missing or invalid.
"""

class SchedulerConstants:
    """Scheduling and batching defaults. Interval values are in seconds."""

    # -------------------------------------
    # Scheduler loop
    # -------------------------------------
    TICK_INTERVAL = 300          # 300s (5 min) between scheduler ticks
    JOB_BATCH_SIZE = 50          # max jobs drained per tick

    # -------------------------------------
    # Reminder sweep
    # -------------------------------------
    REMINDER_HORIZON_DAYS = 30   # look-ahead window for deadline reminders
    UPCOMING_JOBS_DAYS = 7       # window used by JobQueue.get_upcoming_jobs
    APPROACHING_DEADLINE_DAYS = 7  # window used by StatusTransitionEngine.check_approaching_deadlines

class ReminderDefaults:
    """Default reminder rules created for a new account."""

    RULES = [
        {
            'name': 'Final Deadline Reminder',
            'description': 'Reminder sent 1 day before application deadline',
            'days_before_deadline': [1],
            'notification_types': ['email', 'push', 'in_app'],
        },
        {
            'name': 'Urgent Deadline Reminder',
            'description': 'Reminder sent 3 days before application deadline',
            'days_before_deadline': [3],
            'notification_types': ['email', 'push', 'in_app'],
        },
        {
            'name': 'Weekly Deadline Reminder',
            'description': 'Reminder sent 7 days before application deadline',
            'days_before_deadline': [7],
            'notification_types': ['email', 'in_app'],
        },
        {
            'name': 'Monthly Deadline Reminder',
            'description': 'Reminder sent 30 days before application deadline',
            'days_before_deadline': [30],
            'notification_types': ['email'],
        },
    ]

class Messages:
    """
    Standard messages used across engines for consistent logging.
    """
    # Status transitions
    TRANSITION_APPLIED = "Application {} moved from {} to {}"
    TRANSITION_REJECTED = "Rejected transition for application {}: {}"
    NOTIFY_FAILED = "Status change notification failed for application {}: {}"

    # Reminder sweep
    SWEEP_STARTED = "Starting reminder sweep (horizon={} days, cutoff={})"
    SWEEP_COMPLETED = "Reminder sweep finished: {} candidates, {} reminders created"
    SWEEP_ITEM_FAILED = "Reminder evaluation failed for application {}: {}"
    REMINDER_CREATED = "Created deadline reminder for application {} ({} days)"
    REMINDER_DUPLICATE = "Reminder already raised for application {} ({} days)"
    JOB_ENQUEUE_FAILED = "Could not enqueue deadline job for application {}: {}"

    # Job drain
    DRAIN_COMPLETED = "Drained {} jobs ({} sent, {} failed)"
    JOB_SENT = "Job {} ({}) sent"
    JOB_FAILED = "Job {} ({}) failed: {}"
    JOB_STATUS_UPDATE_FAILED = "Could not record status {} for job {}: {}"
    JOB_PLACEHOLDER = "No dispatch recipe for {} job {}; marking as sent"

    # Scheduler lifecycle
    SCHEDULER_STARTED = "Job scheduler started (interval={}s, batch={})"
    SCHEDULER_STOPPED = "Job scheduler stopped"
    SCHEDULER_ALREADY_RUNNING = "Job scheduler is already running"
    SCHEDULER_NOT_RUNNING = "Job scheduler is not running"
    TICK_COMPLETED = "Tick {} finished: {} reminders created, {} jobs processed"
    TICK_STEP_FAILED = "Scheduler step '{}' failed: {}"
