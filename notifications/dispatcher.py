"""
Notification Dispatcher

The boundary between the core and notification delivery. The engines call
`dispatch(user_id, kind, payload)` and treat any exception as a failed
delivery; what "delivery" means is up to the implementation.

FileNotificationDispatcher persists each notification as one JSON line in an
outbox file (data_dir/notifications.jsonl by default) for the presentation
layer to pick up. Email and push delivery are not handled here.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

import aiofiles

from errors import DispatchError
from models.notification_models import Notification, NotificationKind
from notifications.builders import build_notification
from storage.logs_manager import LogsManager, log_message

class NotificationDispatcher(ABC):
    @abstractmethod
    async def dispatch(self, user_id: str, kind: NotificationKind, payload: Dict[str, Any]) -> Notification:
        """Persist or deliver one notification. Raises on failure."""

class FileNotificationDispatcher(NotificationDispatcher):
    def __init__(self, settings: dict, logs_manager: LogsManager = None):
        """
        Args:
            settings (dict): Uses settings['system']['data_dir'] and
                settings['notifications']['outbox_file'].
            logs_manager (LogsManager, optional): falls back to print.
        """
        data_dir = Path(settings.get('system', {}).get('data_dir', './data'))
        outbox = settings.get('notifications', {}).get('outbox_file', 'notifications.jsonl')
        self.outbox_path = data_dir / outbox
        self.outbox_path.parent.mkdir(parents=True, exist_ok=True)
        self.logs_manager = logs_manager
        self._lock = asyncio.Lock()

    async def dispatch(self, user_id: str, kind: NotificationKind, payload: Dict[str, Any]) -> Notification:
        notification = build_notification(user_id, kind, payload)
        line = notification.model_dump_json()
        async with self._lock:
            try:
                async with aiofiles.open(self.outbox_path, 'a', encoding='utf-8') as f:
                    await f.write(line + "\n")
            except OSError as e:
                raise DispatchError(f"Could not write notification for user {user_id}: {e}") from e

        await log_message(
            self.logs_manager, 'debug',
            f"[Dispatcher] {notification.kind.value} notification stored for user {user_id}"
        )
        return notification

    async def read_outbox(self) -> list[Notification]:
        """Load every notification written so far, oldest first."""
        if not self.outbox_path.exists():
            return []
        async with aiofiles.open(self.outbox_path, 'r', encoding='utf-8') as f:
            content = await f.read()
        return [Notification.model_validate(json.loads(line)) for line in content.splitlines() if line.strip()]
