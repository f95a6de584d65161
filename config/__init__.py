"""
Configuration Package

Loads the tracker's settings dict from the environment (and .env).

Components:
- settings: scheduler, reminder, storage, notification and system sections
"""

from .settings import load_settings

__all__ = ['load_settings']
