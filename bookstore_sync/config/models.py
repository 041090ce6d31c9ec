"""Pydantic models used across Bookstore-Sync configuration flow."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from apscheduler.triggers.cron import CronTrigger
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_FUZZY_THRESHOLD = 2
DEFAULT_CHUNK_SIZE = 2000
DEFAULT_FETCH_COUNT = 100_000
HOURLY_CRON = "0 * * * *"


class ScheduleType(str, Enum):
    """Scheduler modes supported for the import job."""

    CRON = "cron"
    INTERVAL = "interval"


class ScheduleConfig(BaseModel):
    """When the import job fires."""

    type: ScheduleType = Field(default=ScheduleType.CRON)
    value: Any = Field(
        default=HOURLY_CRON,
        description="Cron expression, interval seconds or interval kwargs, depending on type.",
    )
    enabled: bool = True

    @model_validator(mode="after")
    def _validate_value(self) -> "ScheduleConfig":
        if self.type is ScheduleType.CRON:
            if not isinstance(self.value, str):
                raise ValueError("Cron schedule requires string expression")
            try:
                CronTrigger.from_crontab(self.value)
            except ValueError as exc:
                raise ValueError(f"Invalid cron expression {self.value!r}: {exc}") from exc
        if self.type is ScheduleType.INTERVAL:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float, dict)):
                raise ValueError("Interval schedule requires seconds (int/float) or kwargs dict")
            if isinstance(self.value, (int, float)) and self.value <= 0:
                raise ValueError("Interval seconds must be positive")
        return self


class ImportSettings(BaseModel):
    """Knobs of the import pipeline, fixed for the lifetime of an orchestrator."""

    fuzzy_threshold: int = Field(default=DEFAULT_FUZZY_THRESHOLD)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE)
    fetch_count: int = Field(default=DEFAULT_FETCH_COUNT)
    run_timeout: float | None = Field(
        default=None,
        description="Seconds after which a run is cancelled; null disables the deadline.",
    )

    @model_validator(mode="after")
    def _validate_bounds(self) -> "ImportSettings":
        if self.fuzzy_threshold < 0:
            raise ValueError("fuzzy_threshold must be >= 0")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if self.fetch_count < 1:
            raise ValueError("fetch_count must be >= 1")
        if self.run_timeout is not None and self.run_timeout <= 0:
            raise ValueError("run_timeout must be positive when set")
        return self


class SourceKind(str, Enum):
    MOCK = "mock"
    HTTP = "http"


class SourceSettings(BaseModel):
    """Which external book source feeds the import."""

    kind: SourceKind = SourceKind.MOCK
    base_url: str | None = None
    timeout: float = 30.0
    headers: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_http(self) -> "SourceSettings":
        if self.kind is SourceKind.HTTP and not self.base_url:
            raise ValueError("http source requires base_url")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        return self


class StoreSettings(BaseModel):
    """Location of the SQLite book store."""

    path: Path = Field(default=Path("bookstore.db"))

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    def resolved_path(self, base_dir: Path) -> Path:
        """Return store path relative to project data directory."""

        if not self.path.is_absolute():
            return (base_dir / self.path).resolve()
        return self.path


class SyncConfig(BaseModel):
    """Root configuration document."""

    pipeline_name: str = "books"
    settings: ImportSettings = Field(default_factory=ImportSettings)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    source: SourceSettings = Field(default_factory=SourceSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)

    @field_validator("pipeline_name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("pipeline_name cannot be empty")
        return value.strip()


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_FETCH_COUNT",
    "DEFAULT_FUZZY_THRESHOLD",
    "HOURLY_CRON",
    "ImportSettings",
    "ScheduleConfig",
    "ScheduleType",
    "SourceKind",
    "SourceSettings",
    "StoreSettings",
    "SyncConfig",
]
