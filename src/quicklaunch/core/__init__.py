"""
Core module - Configuration and data model.
"""
from .config import Settings, RankingSettings, LauncherSettings, LoggingSettings, get_settings
from .schemas import (
    PageMetadata,
    PageRegistry,
    Visit,
    VisitEntry,
    VisitsStore,
    to_seconds,
)

__all__ = [
    "Settings",
    "RankingSettings",
    "LauncherSettings",
    "LoggingSettings",
    "get_settings",
    "PageMetadata",
    "PageRegistry",
    "Visit",
    "VisitEntry",
    "VisitsStore",
    "to_seconds",
]
