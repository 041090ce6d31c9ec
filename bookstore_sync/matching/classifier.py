"""Exact/fuzzy duplicate classification of a single title."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from ..config.models import DEFAULT_FUZZY_THRESHOLD
from .distance import levenshtein


class DuplicateKind(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    NOVEL = "novel"


def classify(
    title: str,
    existing_titles: Sequence[str],
    threshold: int = DEFAULT_FUZZY_THRESHOLD,
) -> DuplicateKind:
    """Decide whether ``title`` duplicates one of ``existing_titles``.

    The exact check ignores case and runs over the whole set before any
    distance is computed. The fuzzy check compares raw strings, so it is
    case-sensitive.
    """

    if threshold < 0:
        raise ValueError("threshold must be >= 0")
    folded = title.casefold()
    if any(existing.casefold() == folded for existing in existing_titles):
        return DuplicateKind.EXACT
    if any(
        levenshtein(existing, title, score_cutoff=threshold) <= threshold
        for existing in existing_titles
    ):
        return DuplicateKind.FUZZY
    return DuplicateKind.NOVEL


__all__ = ["DuplicateKind", "classify"]
