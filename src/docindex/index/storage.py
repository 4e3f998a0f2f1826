"""Snapshot stores for persisting the inverted index."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Protocol

from docindex.errors import SnapshotError

LOGGER = logging.getLogger(__name__)

SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


class SnapshotStore(Protocol):
    path: Path

    def load(self) -> Dict[str, Any] | None:
        """Return the persisted snapshot, or ``None`` when nothing was saved yet."""

    def save(self, state: Dict[str, Any]) -> None:
        """Persist a snapshot, replacing the previous one."""


class JSONSnapshotStore:
    """Keeps the snapshot in a single JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                state = json.load(handle)
        except OSError as exc:
            raise SnapshotError(f"could not open index file {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"could not parse index file {self.path}: {exc}") from exc
        if not isinstance(state, dict):
            raise SnapshotError(f"index file {self.path} does not contain an object")
        return state

    def save(self, state: Dict[str, Any]) -> None:
        LOGGER.info("Saving %s...", self.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=self.path.name, suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(state, handle, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class SQLiteSnapshotStore:
    """Keeps the snapshot in two SQLite tables."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
            self._ensure_schema()
        except sqlite3.DatabaseError as exc:
            raise SnapshotError(f"could not open index database {self.path}: {exc}") from exc

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    path TEXT PRIMARY KEY,
                    term_freq TEXT NOT NULL,
                    count INTEGER NOT NULL,
                    last_modified REAL NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS document_freq (
                    term TEXT PRIMARY KEY,
                    frequency INTEGER NOT NULL
                )
                """
            )

    def load(self) -> Dict[str, Any] | None:
        try:
            documents = self._conn.execute(
                "SELECT path, term_freq, count, last_modified FROM documents"
            ).fetchall()
            frequencies = self._conn.execute(
                "SELECT term, frequency FROM document_freq"
            ).fetchall()
        except sqlite3.DatabaseError as exc:
            raise SnapshotError(f"could not read index database {self.path}: {exc}") from exc

        if not documents and not frequencies:
            return None

        try:
            return {
                "documents": {
                    row["path"]: {
                        "term_freq": json.loads(row["term_freq"]),
                        "count": row["count"],
                        "last_modified": row["last_modified"],
                    }
                    for row in documents
                },
                "document_freq": {row["term"]: row["frequency"] for row in frequencies},
            }
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"corrupt term map in {self.path}: {exc}") from exc

    def save(self, state: Dict[str, Any]) -> None:
        LOGGER.info("Saving %s...", self.path)
        with self.transaction() as conn:
            conn.execute("DELETE FROM documents")
            conn.execute("DELETE FROM document_freq")
            conn.executemany(
                "INSERT INTO documents(path, term_freq, count, last_modified) VALUES (?, ?, ?, ?)",
                (
                    (
                        path,
                        json.dumps(entry["term_freq"], ensure_ascii=False),
                        entry["count"],
                        entry["last_modified"],
                    )
                    for path, entry in state["documents"].items()
                ),
            )
            conn.executemany(
                "INSERT INTO document_freq(term, frequency) VALUES (?, ?)",
                state["document_freq"].items(),
            )


def open_store(path: Path) -> SnapshotStore:
    """Pick a store by file suffix: SQLite for database suffixes, JSON otherwise."""
    if Path(path).suffix.lower() in SQLITE_SUFFIXES:
        return SQLiteSnapshotStore(path)
    return JSONSnapshotStore(path)
