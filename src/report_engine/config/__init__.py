"""Configuration management module.

This module provides:
- Environment-based configuration with validation
- Export-specific settings
- Cached settings access via get_settings()
"""

from .settings import (
    Environment,
    ExportSettings,
    LogFormat,
    LogLevel,
    Settings,
    get_settings,
)

__all__ = [
    # Main settings
    "Settings",
    "get_settings",
    # Enums
    "Environment",
    "LogLevel",
    "LogFormat",
    # Component settings
    "ExportSettings",
]
