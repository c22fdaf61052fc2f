"""
Configuration package for tripdb.
"""

from .settings import (
    DEFAULT_COLLECTIONS,
    Settings,
    Environment,
    LogLevel,
    BackendType,
    StoreSettings,
    RedisSettings,
    AuthSettings,
    settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "DEFAULT_COLLECTIONS",
    "Settings",
    "Environment",
    "LogLevel",
    "BackendType",
    "StoreSettings",
    "RedisSettings",
    "AuthSettings",
    "settings",
    "get_settings",
    "reload_settings",
]
