"""
Notifications Package

Components:
- NotificationDispatcher: contract the engines dispatch through
- FileNotificationDispatcher: JSON-lines outbox implementation
- build_notification: (kind, payload) -> Notification
"""

from .builders import build_notification
from .dispatcher import FileNotificationDispatcher, NotificationDispatcher

__all__ = ['FileNotificationDispatcher', 'NotificationDispatcher', 'build_notification']
