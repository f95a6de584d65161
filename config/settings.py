"""
Configuration Management Module

This module handles loading and managing application configuration settings,
including environment variables and default values.

Required Modules:
- os: For environment variable access
- dotenv: For loading .env files
- pathlib: For creating the data directory
"""

import os
from dotenv import load_dotenv
from pathlib import Path

from constants import SchedulerConstants

VALID_STORE_BACKENDS = ('memory', 'csv')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'

def _validate_env_vars(config: dict) -> list[str]:
    """Validate environment variables and return list of warnings."""
    warnings = []

    scheduler = config['scheduler']
    try:
        scheduler['interval_seconds'] = float(scheduler['interval_seconds'])
        if scheduler['interval_seconds'] <= 0:
            raise ValueError
    except ValueError:
        warnings.append(
            f"Invalid SCHEDULER_INTERVAL_SECONDS value. Using default: {SchedulerConstants.TICK_INTERVAL}"
        )
        scheduler['interval_seconds'] = float(SchedulerConstants.TICK_INTERVAL)

    try:
        scheduler['job_batch_size'] = int(scheduler['job_batch_size'])
        if scheduler['job_batch_size'] <= 0:
            raise ValueError
    except ValueError:
        warnings.append(f"Invalid JOB_BATCH_SIZE value. Using default: {SchedulerConstants.JOB_BATCH_SIZE}")
        scheduler['job_batch_size'] = SchedulerConstants.JOB_BATCH_SIZE

    reminders = config['reminders']
    try:
        reminders['horizon_days'] = int(reminders['horizon_days'])
        if reminders['horizon_days'] < 0:
            raise ValueError
    except ValueError:
        warnings.append(
            f"Invalid REMINDER_HORIZON_DAYS value. Using default: {SchedulerConstants.REMINDER_HORIZON_DAYS}"
        )
        reminders['horizon_days'] = SchedulerConstants.REMINDER_HORIZON_DAYS

    if config['storage']['backend'] not in VALID_STORE_BACKENDS:
        warnings.append(f"Unknown STORE_BACKEND '{config['storage']['backend']}'. Using default: csv")
        config['storage']['backend'] = 'csv'

    if config['system']['log_level'] not in VALID_LOG_LEVELS:
        warnings.append(f"Invalid LOG_LEVEL '{config['system']['log_level']}'. Using default: INFO")
        config['system']['log_level'] = 'INFO'

    return warnings

def _setup_data_directories(config: dict) -> list[str]:
    """Setup required data directories and return any warnings."""
    warnings = []
    base = Path(config['system']['data_dir'])
    required_dirs = [base, base / 'logs', Path(config['storage']['data_dir'])]

    for path in required_dirs:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            warnings.append(f"Failed to create directory '{path}': {e}")

    return warnings

def load_settings() -> dict:
    """
    Load and validate all configuration settings.

    Numeric values that fail to parse (or are out of range) fall back to the
    defaults in `constants.SchedulerConstants`; a warning is printed for each.
    """
    load_dotenv()  # Load variables from .env

    base_data_dir = os.getenv('DATA_DIR', './data')

    config = {
        'scheduler': {
            'interval_seconds': os.getenv('SCHEDULER_INTERVAL_SECONDS', str(SchedulerConstants.TICK_INTERVAL)),
            'job_batch_size': os.getenv('JOB_BATCH_SIZE', str(SchedulerConstants.JOB_BATCH_SIZE)),
            'run_on_start': _env_flag('SCHEDULER_RUN_ON_START', 'True'),
        },
        'reminders': {
            'horizon_days': os.getenv('REMINDER_HORIZON_DAYS', str(SchedulerConstants.REMINDER_HORIZON_DAYS)),
        },
        'storage': {
            'backend': os.getenv('STORE_BACKEND', 'csv').lower().strip(),
            'data_dir': os.getenv('STORE_DATA_DIR', str(Path(base_data_dir) / 'store')),
        },
        'notifications': {
            'outbox_file': os.getenv('NOTIFICATIONS_OUTBOX', 'notifications.jsonl'),
        },
        'system': {
            'data_dir': base_data_dir,
            'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
            'debug_mode': _env_flag('DEBUG_MODE', 'False'),
        },
    }

    warnings = []
    warnings.extend(_validate_env_vars(config))
    warnings.extend(_setup_data_directories(config))

    for warning in warnings:
        print(f"[Settings] WARNING: {warning}")

    return config
