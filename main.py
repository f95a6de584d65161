"""
Application Deadline Tracker - host process

This file sets up:
1) Configuration & logs
2) The store backend and the notification outbox
3) The status and reminder engines
4) The job scheduler, which runs until interrupted (Ctrl+C)

Status transitions are not driven from here; a host caller (API, admin tool)
builds a StatusTransitionEngine over the same store and dispatcher.
"""

import asyncio

from config.settings import load_settings
from engines import ReminderRuleEngine, StatusTransitionEngine
from notifications import FileNotificationDispatcher
from orchestrator import JobProcessor, JobScheduler
from storage import LogsManager, build_store

def build_components(settings: dict, logs_manager: LogsManager = None) -> dict:
    """Wire the store, dispatcher, engines and scheduler from settings."""
    store = build_store(settings)
    dispatcher = FileNotificationDispatcher(settings, logs_manager)
    reminder_engine = ReminderRuleEngine(
        store,
        horizon_days=settings['reminders']['horizon_days'],
        logs_manager=logs_manager,
    )
    job_processor = JobProcessor(store, dispatcher, logs_manager)
    scheduler = JobScheduler.from_settings(settings, reminder_engine, job_processor, logs_manager)
    return {
        'store': store,
        'dispatcher': dispatcher,
        'status_engine': StatusTransitionEngine(store, dispatcher, logs_manager),
        'reminder_engine': reminder_engine,
        'job_processor': job_processor,
        'scheduler': scheduler,
    }

async def async_main():
    """
    The main async function with proper error handling and resource management.
    """
    logs_manager = None
    scheduler = None

    try:
        # 1) Load configuration
        settings = load_settings()

        # 2) Initialize logs
        logs_manager = LogsManager(settings)
        await logs_manager.initialize()
        await logs_manager.info("Starting Application Deadline Tracker...")
        await logs_manager.info(f"Store backend: {settings['storage']['backend']}")

        # 3) Build components
        components = build_components(settings, logs_manager)
        scheduler = components['scheduler']

        # 4) Run the scheduler until cancelled
        await scheduler.start()
        while scheduler.is_running:
            await asyncio.sleep(1)

    except asyncio.CancelledError:
        if logs_manager:
            await logs_manager.warning("Host task cancelled, shutting down")
        raise
    except Exception as e:
        if logs_manager:
            await logs_manager.error(f"Critical error in async_main: {str(e)}")
        raise
    finally:
        if scheduler:
            try:
                await scheduler.stop()
            except Exception as e:
                if logs_manager:
                    await logs_manager.error(f"Error while stopping scheduler: {str(e)}")

        if logs_manager:
            try:
                await logs_manager.info("Shutting down logging system...")
                await logs_manager.shutdown()
            except Exception as e:
                # Can't use logs_manager here since we're shutting it down
                print(f"Error during logs cleanup: {e}")

def main():
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        print("\nUser pressed Ctrl+C. Scheduler stopped.")

if __name__ == "__main__":
    main()
