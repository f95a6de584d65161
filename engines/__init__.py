"""
Engines Package

Components:
- StatusTransitionEngine: legal lifecycle transitions and history
- ReminderRuleEngine: deadline reminder sweep and reminder rule management
"""

from .reminder_engine import ReminderRuleEngine
from .status_engine import StatusTransitionEngine

__all__ = ['ReminderRuleEngine', 'StatusTransitionEngine']
