"""Shared fixtures: in-memory store, scripted sources, temp config repository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

import pytest
import structlog

from bookstore_sync.config import ConfigLocator, ConfigRepository, ImportSettings
from bookstore_sync.errors import StoreUnavailable
from bookstore_sync.infra import BaseBookStore
from bookstore_sync.models import CandidateRecord
from bookstore_sync.sources import BookSource


class RecordingStore(BaseBookStore):
    """In-memory store recording every call made by the pipeline."""

    def __init__(self, titles: Iterable[str] = (), fail_on_chunk: int | None = None) -> None:
        self.titles: list[str] = list(titles)
        self.fail_on_chunk = fail_on_chunk
        self.lookups: list[list[str]] = []
        self.inserted_chunks: list[list[CandidateRecord]] = []
        self._next_id = 1

    def find_titles(self, titles: Iterable[str]) -> set[str]:
        wanted = list(titles)
        self.lookups.append(wanted)
        folded = {title.casefold() for title in wanted}
        return {title for title in self.titles if title.casefold() in folded}

    def insert_many(self, records: Sequence[CandidateRecord]) -> list[int]:
        if self.fail_on_chunk is not None and len(self.inserted_chunks) + 1 == self.fail_on_chunk:
            raise StoreUnavailable("disk full")
        self.inserted_chunks.append(list(records))
        ids = list(range(self._next_id, self._next_id + len(records)))
        self._next_id += len(records)
        self.titles.extend(record.title for record in records)
        return ids

    def count(self) -> int:
        return len(self.titles)

    @property
    def chunk_sizes(self) -> list[int]:
        return [len(chunk) for chunk in self.inserted_chunks]


class ScriptedSource(BookSource):
    def __init__(self, records: Sequence[CandidateRecord] = (), error: Exception | None = None) -> None:
        self.records = list(records)
        self.error = error
        self.calls: list[tuple[int, float | None]] = []

    def fetch(self, count: int, timeout: float | None = None) -> list[CandidateRecord]:
        self.calls.append((count, timeout))
        if self.error is not None:
            raise self.error
        return self.records[:count]


def books(*titles: str, price: str = "10") -> list[CandidateRecord]:
    return [CandidateRecord(title=title, price=Decimal(price)) for title in titles]


@pytest.fixture
def make_books() -> Callable[..., list[CandidateRecord]]:
    return books


@pytest.fixture
def recording_store() -> Callable[..., RecordingStore]:
    return RecordingStore


@pytest.fixture
def scripted_source() -> Callable[..., ScriptedSource]:
    return ScriptedSource


@pytest.fixture
def sample_settings() -> Callable[..., ImportSettings]:
    def _builder(**overrides: Any) -> ImportSettings:
        base: dict[str, Any] = {"fuzzy_threshold": 2, "chunk_size": 2000, "fetch_count": 100}
        base.update(overrides)
        return ImportSettings(**base)

    return _builder


@pytest.fixture
def quiet_logger() -> structlog.BoundLogger:
    return structlog.get_logger("bookstore_sync.tests")


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("BOOKSTORE_SYNC_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    yield ConfigRepository(locator)
