"""Partition an incoming batch into accepted and skipped books."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..config.models import DEFAULT_FUZZY_THRESHOLD
from ..matching import DuplicateKind, classify
from ..models import CandidateRecord


@dataclass(slots=True)
class ImportOutcome:
    accepted: list[CandidateRecord] = field(default_factory=list)
    skipped_exact: int = 0
    skipped_fuzzy: int = 0
    dropped_blank: int = 0

    @property
    def considered(self) -> int:
        """Candidates with a non-blank title."""

        return self.skipped_exact + self.skipped_fuzzy + len(self.accepted)


def incoming_titles(candidates: Iterable[CandidateRecord]) -> list[str]:
    """Trimmed, non-blank titles, distinct ignoring case, first spelling kept."""

    seen: set[str] = set()
    titles: list[str] = []
    for candidate in candidates:
        title = (candidate.title or "").strip()
        if not title:
            continue
        key = title.casefold()
        if key in seen:
            continue
        seen.add(key)
        titles.append(title)
    return titles


def filter_candidates(
    candidates: Iterable[CandidateRecord],
    existing_titles: Sequence[str],
    threshold: int = DEFAULT_FUZZY_THRESHOLD,
) -> ImportOutcome:
    """Drop blanks, exact and fuzzy duplicates of ``existing_titles``.

    Candidates are only compared with the existing snapshot, never with each
    other. Kept records carry their trimmed title and keep their input order.
    """

    outcome = ImportOutcome()
    for candidate in candidates:
        title = (candidate.title or "").strip()
        if not title:
            outcome.dropped_blank += 1
            continue
        kind = classify(title, existing_titles, threshold)
        if kind is DuplicateKind.EXACT:
            outcome.skipped_exact += 1
        elif kind is DuplicateKind.FUZZY:
            outcome.skipped_fuzzy += 1
        else:
            outcome.accepted.append(
                candidate if candidate.title == title else candidate.with_title(title)
            )
    return outcome


__all__ = ["ImportOutcome", "filter_candidates", "incoming_titles"]
