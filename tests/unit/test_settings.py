"""
Unit Tests for config.settings
"""

import pytest

import config.settings as settings_module
from config.settings import load_settings

ENV_VARS = [
    'DATA_DIR', 'LOG_LEVEL', 'SCHEDULER_INTERVAL_SECONDS', 'JOB_BATCH_SIZE', 'SCHEDULER_RUN_ON_START',
    'REMINDER_HORIZON_DAYS', 'STORE_BACKEND', 'STORE_DATA_DIR', 'NOTIFICATIONS_OUTBOX', 'DEBUG_MODE',
]

@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the picture
    monkeypatch.setattr(settings_module, 'load_dotenv', lambda: None)
    monkeypatch.setenv('DATA_DIR', str(tmp_path / 'data'))
    return monkeypatch

def test_defaults(clean_env, tmp_path):
    settings = load_settings()

    assert settings['scheduler'] == {'interval_seconds': 300.0, 'job_batch_size': 50, 'run_on_start': True}
    assert settings['reminders']['horizon_days'] == 30
    assert settings['storage']['backend'] == 'csv'
    assert settings['storage']['data_dir'] == str(tmp_path / 'data' / 'store')
    assert settings['notifications']['outbox_file'] == 'notifications.jsonl'
    assert settings['system']['log_level'] == 'INFO'
    assert (tmp_path / 'data' / 'logs').is_dir()
    assert (tmp_path / 'data' / 'store').is_dir()

def test_overrides(clean_env):
    clean_env.setenv('SCHEDULER_INTERVAL_SECONDS', '2.5')
    clean_env.setenv('JOB_BATCH_SIZE', '10')
    clean_env.setenv('SCHEDULER_RUN_ON_START', 'false')
    clean_env.setenv('REMINDER_HORIZON_DAYS', '0')
    clean_env.setenv('STORE_BACKEND', 'Memory')
    clean_env.setenv('LOG_LEVEL', 'debug')

    settings = load_settings()

    assert settings['scheduler'] == {'interval_seconds': 2.5, 'job_batch_size': 10, 'run_on_start': False}
    assert settings['reminders']['horizon_days'] == 0
    assert settings['storage']['backend'] == 'memory'
    assert settings['system']['log_level'] == 'DEBUG'

@pytest.mark.parametrize("name, value", [
    ('SCHEDULER_INTERVAL_SECONDS', 'soon'),
    ('SCHEDULER_INTERVAL_SECONDS', '-1'),
    ('JOB_BATCH_SIZE', '0'),
    ('JOB_BATCH_SIZE', 'lots'),
    ('REMINDER_HORIZON_DAYS', '-3'),
])
def test_invalid_numbers_fall_back(clean_env, capsys, name, value):
    clean_env.setenv(name, value)

    settings = load_settings()

    assert settings['scheduler']['interval_seconds'] == 300.0
    assert settings['scheduler']['job_batch_size'] == 50
    assert settings['reminders']['horizon_days'] == 30
    assert f"Invalid {name} value" in capsys.readouterr().out

def test_unknown_backend_and_level_fall_back(clean_env, capsys):
    clean_env.setenv('STORE_BACKEND', 'postgres')
    clean_env.setenv('LOG_LEVEL', 'chatty')

    settings = load_settings()

    assert settings['storage']['backend'] == 'csv'
    assert settings['system']['log_level'] == 'INFO'
    out = capsys.readouterr().out
    assert "[Settings] WARNING: Unknown STORE_BACKEND 'postgres'" in out
    assert "[Settings] WARNING: Invalid LOG_LEVEL 'CHATTY'" in out
