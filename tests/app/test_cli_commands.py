from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

from typer.testing import CliRunner

from bookstore_sync.app import AppState, app
from bookstore_sync.config import SyncConfig
from bookstore_sync.errors import StoreUnavailable
from bookstore_sync.models import CandidateRecord, ImportSummary


class StubOrchestrator:
    def __init__(self, summary: ImportSummary | None = None, error: Exception | None = None) -> None:
        self.summary = summary
        self.error = error
        self.calls = 0

    def run_import(self, cancel=None) -> ImportSummary:  # noqa: ARG002
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.summary


def make_state(
    orchestrator,
    jobs=(),
    config: SyncConfig | None = None,
    store_count: int = 0,
    latest: list[CandidateRecord] | None = None,
) -> AppState:
    cfg = config or SyncConfig()
    repository = SimpleNamespace(load=lambda: cfg)
    scheduled: list[str] = []
    scheduler = SimpleNamespace(
        list_jobs=lambda: list(jobs),
        schedule_import=lambda name, schedule, run: scheduled.append(name),
        scheduled=scheduled,
    )
    listed: list[int] = []

    def _list_books(limit: int = 20) -> list[CandidateRecord]:
        listed.append(limit)
        return list(latest or [])[:limit]

    store = SimpleNamespace(count=lambda: store_count, list_books=_list_books, listed=listed)
    return AppState(repository=repository, scheduler=scheduler, orchestrator=orchestrator, store=store)


def _summary() -> ImportSummary:
    return ImportSummary(fetched=10, skipped_exact=3, skipped_fuzzy=2, accepted=5, chunks=1)


def test_cli_run_prints_summary(monkeypatch) -> None:
    state = make_state(StubOrchestrator(_summary()))
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["run"])
    assert result.exit_code == 0, result.stdout
    assert state.orchestrator.calls == 1
    output = result.stdout
    assert "Import result" in output
    assert "Skipped (exact)" in output
    assert "Skipped (fuzzy)" in output
    assert "Imported" in output


def test_cli_run_quiet(monkeypatch) -> None:
    state = make_state(StubOrchestrator(_summary()))
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["run", "--quiet"])
    assert result.exit_code == 0, result.stdout
    assert "fetched 10, exact 3, fuzzy 2, imported 5" in result.stdout


def test_cli_run_failure_reports_stage(monkeypatch) -> None:
    error = StoreUnavailable(
        "Chunk 2/3 failed", stage="committing", progress={"fetched": 10, "chunks_committed": 1}
    )
    state = make_state(StubOrchestrator(error=error))
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["run"])
    assert result.exit_code == 1
    assert "committing" in result.stdout
    assert "chunks_committed 1" in result.stdout


def test_cli_jobs(monkeypatch) -> None:
    jobs = [{"id": "import::books", "next_run_time": "soon", "trigger": "cron[minute='0']"}]
    state = make_state(StubOrchestrator(_summary()), jobs=jobs)
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["jobs"])
    assert result.exit_code == 0, result.stdout
    assert "import::books" in result.stdout
    assert state.scheduler.scheduled == ["books"]


def test_cli_config_show(monkeypatch) -> None:
    state = make_state(StubOrchestrator(_summary()))
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["config", "show"])
    assert result.exit_code == 0, result.stdout
    assert "fuzzy_threshold" in result.stdout
    assert "2000" in result.stdout


def test_cli_store_count(monkeypatch) -> None:
    state = make_state(StubOrchestrator(_summary()), store_count=42)
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["store", "count"])
    assert result.exit_code == 0, result.stdout
    assert "42 books" in result.stdout


def test_cli_set_threshold_rejects_negative(monkeypatch, temp_config_repository) -> None:
    state = make_state(StubOrchestrator(_summary()))
    state.repository = temp_config_repository
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["config", "set-threshold", "--", "-1"])
    assert result.exit_code == 1
    assert "Invalid setting" in result.stdout
    ok = CliRunner().invoke(app, ["config", "set-threshold", "3"])
    assert ok.exit_code == 0, ok.stdout
    assert temp_config_repository.load().settings.fuzzy_threshold == 3


def test_cli_store_list_shows_latest_books(monkeypatch) -> None:
    latest = [
        CandidateRecord(title="[Draft] Emma", price=Decimal("18.99")),
        CandidateRecord(title="Dune", price=Decimal("9.99")),
    ]
    state = make_state(StubOrchestrator(_summary()), latest=latest)
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["store", "list", "--limit", "5"])
    assert result.exit_code == 0, result.stdout
    assert state.store.listed == [5]
    assert "Latest books" in result.stdout
    assert "[Draft] Emma" in result.stdout
    assert "18.99" in result.stdout


def test_cli_store_list_empty(monkeypatch) -> None:
    state = make_state(StubOrchestrator(_summary()))
    monkeypatch.setattr("bookstore_sync.app.build_state", lambda verbose: state)
    result = CliRunner().invoke(app, ["store", "list"])
    assert result.exit_code == 0, result.stdout
    assert state.store.listed == [20]
    assert "Store is empty." in result.stdout
