"""
Configuration module for vidy.

Provides application settings and database connection management.
"""

from __future__ import annotations

from vidy.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
