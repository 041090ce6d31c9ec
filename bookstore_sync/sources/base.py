"""Book source Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import CandidateRecord


class BookSource(ABC):
    """Uniform contract for the external catalogue feeding the import."""

    @abstractmethod
    def fetch(self, count: int, timeout: float | None = None) -> list[CandidateRecord]:
        """Return up to ``count`` candidate books.

        Raises ``SourceUnavailable`` when the catalogue cannot be reached.
        """

    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["BookSource"]
