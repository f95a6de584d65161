"""
Utility functions and helpers for the deadline tracker.
"""

from .date_utils import as_date, days_until_deadline, ensure_aware, horizon_cutoff, utc_now

__all__ = [
    'as_date',
    'days_until_deadline',
    'ensure_aware',
    'horizon_cutoff',
    'utc_now'
]
