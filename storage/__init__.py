"""
Storage Package

This package handles all data persistence operations and logging functionality.

Components:
- BaseStore: The store contract used by the engines and the scheduler
- MemoryStore: Dict-backed store
- CSVStore: pandas-backed CSV store
- LogsManager: Manages application logging
"""

from .base_store import BaseStore
from .csv_store import CSVStore
from .logs_manager import LogsManager, log_message
from .memory_store import MemoryStore

__all__ = ['BaseStore', 'CSVStore', 'LogsManager', 'MemoryStore', 'build_store', 'log_message']

def build_store(settings: dict) -> BaseStore:
    """Create the backend selected by settings['storage']['backend']."""
    storage = settings.get('storage', {})
    if storage.get('backend') == 'memory':
        return MemoryStore()
    return CSVStore({'data_dir': storage.get('data_dir', './data/store')})
