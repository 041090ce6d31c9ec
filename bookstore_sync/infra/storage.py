"""SQLite connection management and the book store."""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from decimal import Decimal
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, Optional, Sequence

from ..errors import StoreUnavailable
from ..models import CandidateRecord

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds
_LOOKUP_BATCH = 500


def title_key(title: Optional[str]) -> Optional[str]:
    """Lookup key for a title: full Unicode case folding."""

    if title is None:
        return None
    return title.casefold()


class SQLiteManager:
    """Manage SQLite connections with basic schema guarantees."""

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()

    def connect(self, path: Path) -> sqlite3.Connection:
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            if path not in self._connections:
                conn = sqlite3.connect(path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                self._connections[path] = conn
                self._ensure_schema(conn)
            return self._connections[path]

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS books (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                title_key TEXT,
                price TEXT NOT NULL,
                created_at TEXT DEFAULT (datetime('now'))
            )
            """
        )
        columns = {row["name"] for row in conn.execute("PRAGMA table_info(books)")}
        if "title_key" not in columns:
            conn.execute("ALTER TABLE books ADD COLUMN title_key TEXT")
        # SQLite's NOCASE only folds ASCII, so keys are computed here
        pending = conn.execute("SELECT id, title FROM books WHERE title_key IS NULL").fetchall()
        if pending:
            conn.executemany(
                "UPDATE books SET title_key = ? WHERE id = ?",
                [(title_key(row["title"]), row["id"]) for row in pending],
            )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_books_title_key ON books(title_key)")
        conn.commit()

    def close(self, path: Path) -> None:
        with self._lock:
            conn = self._connections.pop(path, None)
        if conn is not None:
            conn.close()


class BaseBookStore(ABC):
    """Store contract consumed by the import pipeline."""

    @abstractmethod
    def find_titles(self, titles: Iterable[str]) -> set[str]:
        """Return the stored titles matching any of ``titles``."""

    @abstractmethod
    def insert_many(self, records: Sequence[CandidateRecord]) -> list[int]:
        """Persist ``records`` atomically and return their new ids."""

    @abstractmethod
    def count(self) -> int:
        """Number of books stored."""

    def close(self) -> None:
        return


class BookStore(BaseBookStore):
    """Books table in a SQLite database.

    Each row carries ``title_key``, the casefolded title, so a stored
    ``"čovjek"`` is found for an incoming ``"ČOVJEK"``. Lookups return the
    stored spelling.
    """

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self._lock = Lock()
        try:
            self._conn = self.manager.connect(db_path)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Cannot open book store {db_path}: {exc}") from exc

    def find_titles(self, titles: Iterable[str]) -> set[str]:
        keys = list(dict.fromkeys(title_key(title) for title in titles))
        found: set[str] = set()
        with self._lock:
            try:
                for start in range(0, len(keys), _LOOKUP_BATCH):
                    batch = keys[start : start + _LOOKUP_BATCH]
                    placeholders = ",".join("?" for _ in batch)
                    cur = self._conn.execute(
                        f"SELECT DISTINCT title FROM books WHERE title_key IN ({placeholders})",
                        batch,
                    )
                    found.update(row["title"] for row in cur.fetchall())
            except sqlite3.Error as exc:
                raise StoreUnavailable(f"Title lookup failed: {exc}") from exc
        return found

    def insert_many(self, records: Sequence[CandidateRecord]) -> list[int]:
        ids: list[int] = []
        with self._lock:
            try:
                with self._conn:
                    for record in records:
                        cur = self._conn.execute(
                            "INSERT INTO books(title, title_key, price) VALUES (?, ?, ?)",
                            (record.title, title_key(record.title), str(record.price)),
                        )
                        ids.append(int(cur.lastrowid))
            except sqlite3.Error as exc:
                raise StoreUnavailable(
                    f"Chunk of {len(records)} books was not committed: {exc}"
                ) from exc
        return ids

    def count(self) -> int:
        with self._lock:
            row = self._conn.execute("SELECT count(*) FROM books").fetchone()
        return int(row[0])

    def list_books(self, limit: int = 20) -> list[CandidateRecord]:
        """Most recently inserted books first."""

        with self._lock:
            rows = self._conn.execute(
                "SELECT title, price FROM books ORDER BY id DESC LIMIT ?", (limit,)
            ).fetchall()
        return [CandidateRecord(title=row["title"], price=Decimal(row["price"])) for row in rows]

    def close(self) -> None:
        self.manager.close(self.db_path)


__all__ = ["BaseBookStore", "BookStore", "SQLiteManager", "title_key"]
