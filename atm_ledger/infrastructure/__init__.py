"""
Infrastructure layer - External dependencies and configuration.

Contains:
- Settings
"""

from .settings import (
    AtmSettings,
    HttpSettings,
    RedisSettings,
    Settings,
    get_settings,
)


__all__ = [
    "AtmSettings",
    "HttpSettings",
    "RedisSettings",
    "Settings",
    "get_settings",
]
