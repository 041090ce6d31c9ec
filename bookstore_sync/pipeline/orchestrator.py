"""Import orchestrator wiring together fetch, dedup filter and chunked commit."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from threading import Lock

import structlog

from ..config import ImportSettings
from ..errors import ImportAlreadyRunning, ImportPipelineError, SourceUnavailable, StoreUnavailable
from ..infra import BaseBookStore
from ..logging_conf import configure_logging, run_context
from ..models import ImportSummary, RunState
from ..sources import BookSource
from .cancellation import CancellationToken
from .committer import BatchCommitter
from .filter import filter_candidates, incoming_titles


class ImportOrchestrator:
    """Run the book import end to end, one run at a time.

    ``run_import`` moves through ``FETCHING -> FILTERING -> COMMITTING`` and
    ends in ``DONE`` or ``FAILED``. Every run starts from scratch.
    """

    def __init__(
        self,
        source: BookSource,
        store: BaseBookStore,
        settings: ImportSettings | None = None,
        pipeline_name: str = "books",
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.source = source
        self.store = store
        self.settings = settings or ImportSettings()
        self.pipeline_name = pipeline_name
        self.logger = (logger or configure_logging()).bind(
            component="orchestrator", pipeline=pipeline_name
        )
        self.committer = BatchCommitter(store, self.settings.chunk_size, logger=self.logger)
        self.state = RunState.IDLE
        self.last_summary: ImportSummary | None = None
        self.last_error: ImportPipelineError | None = None
        self._run_lock = Lock()

    @property
    def running(self) -> bool:
        return self._run_lock.locked()

    def run_import(self, cancel: CancellationToken | None = None) -> ImportSummary:
        if not self._run_lock.acquire(blocking=False):
            self.logger.warning("import_rejected_already_running", state=self.state.value)
            raise ImportAlreadyRunning(
                f"Import '{self.pipeline_name}' is already running",
                stage=self.state.value,
            )
        try:
            if cancel is None and self.settings.run_timeout is not None:
                cancel = CancellationToken(timeout=self.settings.run_timeout)
            run_id = uuid.uuid4().hex[:12]
            with run_context(run_id=run_id):
                return self._run(run_id, cancel)
        finally:
            self._run_lock.release()

    # ------------------------------------------------------------------
    def _run(self, run_id: str, cancel: CancellationToken | None) -> ImportSummary:
        started_at = datetime.now(timezone.utc)
        progress: dict[str, int] = {}
        self.state = RunState.IDLE
        self.logger.info(
            "import_started",
            fuzzy_threshold=self.settings.fuzzy_threshold,
            chunk_size=self.settings.chunk_size,
            fetch_count=self.settings.fetch_count,
        )
        try:
            self._enter(RunState.FETCHING, cancel)
            timeout = cancel.remaining() if cancel is not None else None
            try:
                candidates = self.source.fetch(self.settings.fetch_count, timeout=timeout)
            except ImportPipelineError:
                raise
            except Exception as exc:
                raise SourceUnavailable(f"Book source failed: {exc}") from exc
            progress["fetched"] = len(candidates)
            self.logger.info("candidates_fetched", fetched=len(candidates))

            self._enter(RunState.FILTERING, cancel)
            titles = incoming_titles(candidates)
            try:
                existing = sorted(self.store.find_titles(titles))
            except ImportPipelineError:
                raise
            except Exception as exc:
                raise StoreUnavailable(f"Existing title lookup failed: {exc}") from exc
            progress["existing"] = len(existing)
            outcome = filter_candidates(candidates, existing, self.settings.fuzzy_threshold)
            del candidates
            progress.update(
                skipped_exact=outcome.skipped_exact,
                skipped_fuzzy=outcome.skipped_fuzzy,
                dropped_blank=outcome.dropped_blank,
                accepted=len(outcome.accepted),
            )
            self.logger.info(
                "fuzzy_filter_done",
                incoming_titles=len(titles),
                existing_titles=len(existing),
                skipped_exact=outcome.skipped_exact,
                skipped_fuzzy=outcome.skipped_fuzzy,
                dropped_blank=outcome.dropped_blank,
                accepted=len(outcome.accepted),
            )

            self._enter(RunState.COMMITTING, cancel)
            report = self.committer.commit(outcome.accepted, cancel=cancel)
        except ImportPipelineError as exc:
            self._fail(exc, progress)
            raise
        except Exception as exc:
            error = ImportPipelineError(str(exc))
            self._fail(error, progress)
            raise error from exc

        self.state = RunState.DONE
        summary = ImportSummary(
            fetched=progress["fetched"],
            skipped_exact=outcome.skipped_exact,
            skipped_fuzzy=outcome.skipped_fuzzy,
            accepted=report.records_committed,
            dropped_blank=outcome.dropped_blank,
            chunks=report.chunks_committed,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            run_id=run_id,
        )
        self.last_summary = summary
        self.last_error = None
        self.logger.info("import_finished", duration=summary.duration_seconds, **summary.as_dict())
        return summary

    def _enter(self, state: RunState, cancel: CancellationToken | None) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled(state.value)
        self.state = state

    def _fail(self, error: ImportPipelineError, progress: dict[str, int]) -> None:
        error.annotate(self.state.value, progress)
        self.state = RunState.FAILED
        self.last_error = error
        self.logger.error("import_failed", **error.describe())


__all__ = ["ImportOrchestrator"]
