"""Title matching primitives."""

from .classifier import DuplicateKind, classify
from .distance import levenshtein

__all__ = ["DuplicateKind", "classify", "levenshtein"]
