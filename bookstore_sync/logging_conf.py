"""Structured logging for the sync service.

structlog events are forwarded to stdlib logging and rendered as JSON by the
handlers: console, ``sync.log`` (every import event) and ``error.log``
(failed runs only). Per-run values such as ``run_id`` live in contextvars, so
every component logging during a run carries them.
"""

from __future__ import annotations

import logging.config
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import structlog

LOGGER_NAME = "bookstore_sync"
SYNC_LOG = "sync.log"
ERROR_LOG = "error.log"

_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_configured_dir: Path | None = None


def _default_log_dir() -> Path:
    env_root = os.environ.get("BOOKSTORE_SYNC_HOME")
    if env_root:
        return Path(env_root).expanduser().resolve() / "logs"
    return Path(__file__).resolve().parents[1] / "logs"


def sync_log_path() -> Path:
    return (_configured_dir or _default_log_dir()) / SYNC_LOG


def _handlers(level: str, log_dir: Path) -> dict[str, dict[str, Any]]:
    def _file(name: str, file_level: str) -> dict[str, Any]:
        return {
            "class": "logging.FileHandler",
            "level": file_level,
            "filename": str(log_dir / name),
            "encoding": "utf-8",
            "formatter": "json",
        }

    return {
        "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"},
        "sync_file": _file(SYNC_LOG, "INFO"),
        "error_file": _file(ERROR_LOG, "ERROR"),
    }


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Set up handlers on first call and return the service logger.

    Later calls only hand out a logger; the first caller's ``verbose`` and
    ``log_dir`` stay in effect for the life of the process.
    """

    global _configured_dir
    if _configured_dir is None:
        target = log_dir or _default_log_dir()
        target.mkdir(parents=True, exist_ok=True)
        level = "DEBUG" if verbose else "INFO"
        handlers = _handlers(level, target)
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {"()": "pythonjsonlogger.jsonlogger.JsonFormatter", "fmt": _JSON_FORMAT}
                },
                "handlers": handlers,
                "loggers": {
                    LOGGER_NAME: {"handlers": list(handlers), "level": level, "propagate": False},
                },
            }
        )
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _configured_dir = target
    return structlog.get_logger(LOGGER_NAME)


@contextmanager
def run_context(**values: Any) -> Iterator[None]:
    """Attach ``values`` to every event logged in this context."""

    with structlog.contextvars.bound_contextvars(**values):
        yield


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


__all__ = ["configure_logging", "run_context", "sync_log_path", "tail_log"]
