"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    ImportSettings,
    ScheduleConfig,
    ScheduleType,
    SourceKind,
    SourceSettings,
    StoreSettings,
    SyncConfig,
)

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "ImportSettings",
    "ScheduleConfig",
    "ScheduleType",
    "SourceKind",
    "SourceSettings",
    "StoreSettings",
    "SyncConfig",
]
