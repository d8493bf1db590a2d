"""Database layer for persisted webhook settings."""

from .engine import DatabaseEngine, close_database, get_database, init_database
from .models import Base, PluginSetting
from .settings import DatabaseSettingsStore

__all__ = [
    "DatabaseEngine",
    "DatabaseSettingsStore",
    "close_database",
    "get_database",
    "init_database",
    "Base",
    "PluginSetting",
]
