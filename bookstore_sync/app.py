"""Typer CLI entrypoint for Bookstore-Sync."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterable

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ConfigRepository, ScheduleConfig, ScheduleType, SyncConfig
from .errors import ImportPipelineError
from .infra import BookStore, SQLiteManager
from .logging_conf import configure_logging, sync_log_path, tail_log
from .models import CandidateRecord, ImportSummary
from .pipeline import ImportOrchestrator
from .scheduler import ImportScheduler
from .sources import build_source

app = typer.Typer(
    help="Bookstore-Sync command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Inspect or change pipeline settings",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)
store_app = typer.Typer(
    name="store",
    help="Book store inspection",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    scheduler: ImportScheduler
    orchestrator: ImportOrchestrator
    store: BookStore


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    config = repository.load()
    store = BookStore(SQLiteManager(), repository.store_path())
    orchestrator = ImportOrchestrator(
        source=build_source(config.source),
        store=store,
        settings=config.settings,
        pipeline_name=config.pipeline_name,
    )
    return AppState(
        repository=repository,
        scheduler=ImportScheduler(),
        orchestrator=orchestrator,
        store=store,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _format_schedule(schedule: ScheduleConfig) -> str:
    if schedule.type is ScheduleType.CRON:
        return f"cron ({schedule.value})"
    return f"interval ({schedule.value})"


def _render_summary_table(summary: ImportSummary) -> Table:
    table = Table(title="Import result", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Fetched", str(summary.fetched))
    table.add_row("Skipped (exact)", str(summary.skipped_exact))
    table.add_row("Skipped (fuzzy)", str(summary.skipped_fuzzy))
    if summary.dropped_blank:
        table.add_row("Blank titles", str(summary.dropped_blank))
    table.add_row("Imported", str(summary.accepted))
    table.add_row("Chunks", str(summary.chunks))
    return table


def _render_jobs_table(jobs: Iterable[dict]) -> Table:
    table = Table(title="Scheduled jobs", box=box.SIMPLE_HEAD)
    table.add_column("Job ID", style="cyan", no_wrap=True)
    table.add_column("Next run", style="green")
    table.add_column("Trigger", style="magenta", overflow="fold")
    for job in jobs:
        table.add_row(
            str(job.get("id", "-")),
            str(job.get("next_run_time", "-")),
            str(job.get("trigger", "-")),
        )
    return table


def _render_books_table(books: Iterable[CandidateRecord]) -> Table:
    table = Table(title="Latest books", box=box.SIMPLE_HEAD)
    table.add_column("Title", style="cyan", overflow="fold")
    table.add_column("Price", style="green", justify="right")
    for book in books:
        table.add_row(escape(book.title), str(book.price))
    return table


def _render_config_table(config: SyncConfig) -> Table:
    table = Table(title=f"Pipeline `{config.pipeline_name}`", box=box.SIMPLE_HEAD)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("fuzzy_threshold", str(config.settings.fuzzy_threshold))
    table.add_row("chunk_size", str(config.settings.chunk_size))
    table.add_row("fetch_count", str(config.settings.fetch_count))
    table.add_row("run_timeout", str(config.settings.run_timeout or "-"))
    table.add_row("schedule", _format_schedule(config.schedule))
    table.add_row("source", config.source.kind.value + (f" ({config.source.base_url})" if config.source.base_url else ""))
    table.add_row("store", str(config.store.path))
    return table


def _report_failure(exc: ImportPipelineError) -> None:
    console.print(
        f"Import failed during `{exc.stage or 'startup'}`: {exc}", style="red", markup=False
    )
    if exc.progress:
        counts = ", ".join(f"{key} {value}" for key, value in exc.progress.items())
        console.print(f"Progress before failure: {counts}", style="dim", markup=False)


app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")
app.add_typer(store_app, name="store")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True)
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Run one import immediately.")
def run_now(
    ctx: typer.Context,
    quiet: bool = typer.Option(False, "--quiet", help="Print a single summary line.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    try:
        summary = state.orchestrator.run_import()
    except ImportPipelineError as exc:
        _report_failure(exc)
        raise typer.Exit(code=1)
    if quiet:
        console.print(
            f"Import finished: fetched {summary.fetched}, exact {summary.skipped_exact}, "
            f"fuzzy {summary.skipped_fuzzy}, imported {summary.accepted}"
        )
        return
    console.print(_render_summary_table(summary))


@app.command("serve", help="Register the import schedule and block until interrupted.")
def serve(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.repository.load()
    if not config.schedule.enabled:
        console.print("Schedule is disabled in configuration.", style="yellow")
        raise typer.Exit(code=1)
    state.scheduler.schedule_import(
        config.pipeline_name, config.schedule, state.orchestrator.run_import
    )
    state.scheduler.start()
    console.print(_render_jobs_table(state.scheduler.list_jobs()))
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("Stopping scheduler…", style="dim")
    finally:
        state.scheduler.shutdown(wait=True)
        state.store.close()


@app.command("jobs", help="Show the import job and its next fire time.")
def jobs(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.repository.load()
    state.scheduler.schedule_import(
        config.pipeline_name, config.schedule, state.orchestrator.run_import
    )
    console.print(_render_jobs_table(state.scheduler.list_jobs()))


@config_app.command("show", help="Print the active configuration.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    console.print(_render_config_table(state.repository.load()))


def _update_setting(state: AppState, **changes: object) -> None:
    try:
        config = state.repository.update_settings(**changes)
    except ValueError as exc:
        console.print(f"Invalid setting: {exc}", style="red", markup=False)
        raise typer.Exit(code=1)
    console.print(_render_config_table(config))


@config_app.command("set-threshold", help="Change the fuzzy duplicate threshold.")
def config_set_threshold(ctx: typer.Context, value: int = typer.Argument(...)) -> None:
    _update_setting(_get_state(ctx), fuzzy_threshold=value)


@config_app.command("set-chunk-size", help="Change the commit chunk size.")
def config_set_chunk_size(ctx: typer.Context, value: int = typer.Argument(...)) -> None:
    _update_setting(_get_state(ctx), chunk_size=value)


@log_app.command("show", help="Show the tail of the sync log.")
def log_show(lines: int = typer.Option(50, "--lines", "-n", help="Number of lines")) -> None:
    entries = tail_log(sync_log_path(), lines)
    if not entries:
        console.print("Log is empty.", style="dim")
        return
    for line in entries:
        console.print(line.rstrip("\n"), markup=False, highlight=False)


@store_app.command("count", help="Number of books stored.")
def store_count(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    console.print(f"{state.store.count()} books in store")


@store_app.command("list", help="Show the most recently imported books.")
def store_list(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of books"),
) -> None:
    state = _get_state(ctx)
    books = state.store.list_books(limit=limit)
    if not books:
        console.print("[yellow]Store is empty.[/yellow]")
        return
    console.print(_render_books_table(books))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
