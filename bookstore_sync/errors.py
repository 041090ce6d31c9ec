"""Exception hierarchy raised by the import pipeline."""

from __future__ import annotations

from typing import Any


class ImportPipelineError(Exception):
    """Base error for an aborted import run.

    ``stage`` is the run state reached when the failure happened and
    ``progress`` the counts collected so far, so an operator can decide
    whether a manual re-run is needed.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        progress: dict[str, int] | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.progress: dict[str, int] = dict(progress or {})

    def annotate(self, stage: str, progress: dict[str, Any]) -> "ImportPipelineError":
        if self.stage is None:
            self.stage = stage
        merged = dict(progress)
        merged.update(self.progress)
        self.progress = merged
        return self

    def describe(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "detail": str(self),
            "stage": self.stage,
            "progress": dict(self.progress),
        }


class SourceUnavailable(ImportPipelineError):
    """The external book source could not deliver candidates."""


class StoreUnavailable(ImportPipelineError):
    """The book store rejected a title lookup or a chunk commit."""


class ImportCancelled(ImportPipelineError):
    """The run was cancelled or exceeded its deadline."""


class ImportAlreadyRunning(ImportPipelineError):
    """Another run of the same pipeline is still in progress."""


__all__ = [
    "ImportAlreadyRunning",
    "ImportCancelled",
    "ImportPipelineError",
    "SourceUnavailable",
    "StoreUnavailable",
]
