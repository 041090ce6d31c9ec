"""Chunked persistence of accepted books."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import structlog

from ..config.models import DEFAULT_CHUNK_SIZE
from ..errors import ImportPipelineError, StoreUnavailable
from ..infra import BaseBookStore
from ..models import CandidateRecord
from .cancellation import CancellationToken


@dataclass(slots=True)
class CommitReport:
    chunks_committed: int
    records_committed: int


class BatchCommitter:
    """Write records to the store in consecutive chunks of at most ``chunk_size``.

    Each chunk is one ``insert_many`` call and is atomic on the store side.
    A failed chunk aborts the commit; earlier chunks stay committed.
    """

    def __init__(
        self,
        store: BaseBookStore,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.store = store
        self.chunk_size = chunk_size
        self.logger = (logger or structlog.get_logger("bookstore_sync")).bind(component="committer")

    def total_chunks(self, count: int) -> int:
        return math.ceil(count / self.chunk_size)

    def commit(
        self,
        records: Sequence[CandidateRecord],
        cancel: CancellationToken | None = None,
    ) -> CommitReport:
        total = self.total_chunks(len(records))
        committed_chunks = 0
        committed_records = 0
        for index, start in enumerate(range(0, len(records), self.chunk_size), start=1):
            progress = {"chunks_committed": committed_chunks, "records_committed": committed_records}
            try:
                if cancel is not None:
                    cancel.raise_if_cancelled("committing")
                chunk = list(records[start : start + self.chunk_size])
                self.store.insert_many(chunk)
            except ImportPipelineError as exc:
                raise exc.annotate("committing", progress)
            except Exception as exc:
                raise StoreUnavailable(
                    f"Chunk {index}/{total} failed: {exc}", stage="committing", progress=progress
                ) from exc
            committed_chunks += 1
            committed_records += len(chunk)
            self.logger.debug("chunk_committed", chunk=index, total=total, size=len(chunk))
            # release per-chunk working set before building the next one
            del chunk
        return CommitReport(chunks_committed=committed_chunks, records_committed=committed_records)


__all__ = ["BatchCommitter", "CommitReport"]
