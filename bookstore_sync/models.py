"""Runtime records flowing through the import pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum


@dataclass(slots=True, frozen=True)
class CandidateRecord:
    """A book offered by the source; identity is assigned by the store."""

    title: str
    price: Decimal

    def with_title(self, title: str) -> "CandidateRecord":
        return replace(self, title=title)


class RunState(str, Enum):
    """Lifecycle of a single import run."""

    IDLE = "idle"
    FETCHING = "fetching"
    FILTERING = "filtering"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class ImportSummary:
    """Counts reported once a run completed."""

    fetched: int
    skipped_exact: int
    skipped_fuzzy: int
    accepted: int
    dropped_blank: int = 0
    chunks: int = 0
    started_at: datetime | None = None
    finished_at: datetime | None = None
    run_id: str = field(default="")

    @property
    def skipped(self) -> int:
        return self.skipped_exact + self.skipped_fuzzy

    @property
    def duration_seconds(self) -> float:
        if self.started_at is None or self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def as_dict(self) -> dict[str, int]:
        return {
            "fetched": self.fetched,
            "skipped_exact": self.skipped_exact,
            "skipped_fuzzy": self.skipped_fuzzy,
            "dropped_blank": self.dropped_blank,
            "accepted": self.accepted,
            "chunks": self.chunks,
        }


__all__ = ["CandidateRecord", "ImportSummary", "RunState"]
