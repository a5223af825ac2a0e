"""Configuration management for DMI.

Usage:
    >>> from dmi.config import get_settings
    >>> settings = get_settings()
    >>> settings.database_engine
    'PostgreSQL'
"""

from dmi.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
