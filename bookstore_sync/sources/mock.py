"""Synthetic catalogue used for local runs and demos."""

from __future__ import annotations

from decimal import Decimal

from ..models import CandidateRecord
from .base import BookSource

BASE_PRICE = Decimal("9.99")


class MockBookSource(BookSource):
    """Generate ``Book {i}`` titles priced between 9.99 and 18.99."""

    def __init__(self, prefix: str = "Book") -> None:
        self.prefix = prefix

    def fetch(self, count: int, timeout: float | None = None) -> list[CandidateRecord]:
        return [
            CandidateRecord(title=f"{self.prefix} {i}", price=BASE_PRICE + (i % 10))
            for i in range(count)
        ]


__all__ = ["MockBookSource"]
