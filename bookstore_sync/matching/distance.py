"""Levenshtein edit distance backed by rapidfuzz."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def levenshtein(a: str, b: str, score_cutoff: int | None = None) -> int:
    """Return the minimum number of single-character edits turning ``a`` into ``b``.

    Insertions, deletions and substitutions all cost 1. Comparison is
    case-sensitive; callers normalise beforehand when they need otherwise.
    With ``score_cutoff`` set, any distance above it is reported as
    ``score_cutoff + 1``.
    """

    return Levenshtein.distance(a, b, score_cutoff=score_cutoff)


__all__ = ["levenshtein"]
