from __future__ import annotations

import pytest

from bookstore_sync.matching import DuplicateKind, classify
from bookstore_sync.matching import classifier as classifier_module

EXISTING = ["Crime and punishment"]


def test_exact_match_ignores_case() -> None:
    assert classify("crime AND punishment", EXISTING) is DuplicateKind.EXACT
    assert classify("Crime and punishment", EXISTING) is DuplicateKind.EXACT


def test_typo_within_threshold_is_fuzzy() -> None:
    assert classify("Criem and punishment", EXISTING, threshold=2) is DuplicateKind.FUZZY


@pytest.mark.parametrize(
    ("threshold", "expected"),
    [
        (0, DuplicateKind.NOVEL),
        (1, DuplicateKind.NOVEL),
        (2, DuplicateKind.FUZZY),
        (3, DuplicateKind.FUZZY),
    ],
)
def test_threshold_boundaries(threshold: int, expected: DuplicateKind) -> None:
    assert classify("Criem and punishment", EXISTING, threshold=threshold) is expected


def test_unrelated_title_is_novel() -> None:
    assert classify("A Completely New Book", EXISTING) is DuplicateKind.NOVEL
    assert classify("Anything", []) is DuplicateKind.NOVEL


def test_fuzzy_check_is_case_sensitive() -> None:
    # differs from the stored title in case and by one letter
    assert classify("CRIME AND PUNISHMENX", EXISTING, threshold=2) is DuplicateKind.NOVEL


def test_exact_short_circuits_distance(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, str]] = []

    def _spy(a: str, b: str, score_cutoff: int | None = None) -> int:
        calls.append((a, b))
        return 0

    monkeypatch.setattr(classifier_module, "levenshtein", _spy)
    result = classify("dune", ["Foundation", "Dune"], threshold=2)
    assert result is DuplicateKind.EXACT
    assert calls == []


def test_negative_threshold_rejected() -> None:
    with pytest.raises(ValueError):
        classify("Dune", ["Dune"], threshold=-1)


def test_fuzzy_uses_cutoff_distance(monkeypatch: pytest.MonkeyPatch) -> None:
    cutoffs: list[int | None] = []
    real = classifier_module.levenshtein

    def _spy(a: str, b: str, score_cutoff: int | None = None) -> int:
        cutoffs.append(score_cutoff)
        return real(a, b, score_cutoff=score_cutoff)

    monkeypatch.setattr(classifier_module, "levenshtein", _spy)
    assert classify("Criem and punishment", EXISTING, threshold=2) is DuplicateKind.FUZZY
    assert cutoffs == [2]
