from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator, List, Optional

from .exceptions import StorageError
from .models import NoteEntity
from .repositories import Repository, require_title, utc_now_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "notes"
    id: str = "id"
    title: str = "title"
    body: str = "body"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()

_SELECT = (
    f"SELECT {_COLS.id}, {_COLS.title}, {_COLS.body}, {_COLS.created_at}, {_COLS.updated_at} "
    f"FROM {_COLS.table}"
)


class SQLiteRepository(Repository):
    """
    SQLite-backed repository. Opens one connection per operation and runs the
    database in write-ahead-log mode so readers never block on the writer.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _conn(self, message: str, **context: Any) -> Generator[sqlite3.Connection, None, None]:
        """
        Yield a connection, committing on success.

        Any sqlite3.Error is re-raised as StorageError(message) with the
        operation context attached for the server log.
        """
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StorageError(message, {"db_path": self._db_path, "cause": repr(exc), **context}) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(message, {"db_path": self._db_path, "cause": repr(exc), **context}) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn("Failed to initialize storage", operation="init") as conn:
            mode = conn.execute("PRAGMA journal_mode=WAL").fetchone()[0]
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.body} TEXT NOT NULL DEFAULT '',
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_updated_at ON {_COLS.table}({_COLS.updated_at})"
            )
        logger.debug("Opened %s (journal_mode=%s)", self._db_path, mode)

    def _row_to_entity(self, row: sqlite3.Row) -> NoteEntity:
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "body": row[_COLS.body] if row[_COLS.body] is not None else "",
            "created_at": str(row[_COLS.created_at]),
            "updated_at": str(row[_COLS.updated_at]),
        }

    def insert(self, title: str, body: str) -> NoteEntity:
        title = require_title(title)
        now = utc_now_iso()
        with self._conn("Failed to create note", operation="insert") as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.title}, {_COLS.body}, {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?)
                """,
                (title, body, now, now),
            )
            row = conn.execute(f"{_SELECT} WHERE {_COLS.id} = ?", (cur.lastrowid,)).fetchone()
            assert row is not None
            return self._row_to_entity(row)

    def list(self) -> List[NoteEntity]:
        with self._conn("Failed to fetch notes", operation="list") as conn:
            rows = conn.execute(
                f"{_SELECT} ORDER BY {_COLS.updated_at} DESC, {_COLS.id} DESC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def get(self, note_id: int) -> Optional[NoteEntity]:
        with self._conn("Failed to fetch note", operation="get", note_id=note_id) as conn:
            row = conn.execute(f"{_SELECT} WHERE {_COLS.id} = ?", (note_id,)).fetchone()
            return self._row_to_entity(row) if row else None

    def update(self, note_id: int, title: str, body: str) -> bool:
        title = require_title(title)
        with self._conn("Failed to update note", operation="update", note_id=note_id) as conn:
            cur = conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.title} = ?, {_COLS.body} = ?, {_COLS.updated_at} = ?
                WHERE {_COLS.id} = ?
                """,
                (title, body, utc_now_iso(), note_id),
            )
            return cur.rowcount > 0

    def delete(self, note_id: int) -> bool:
        with self._conn("Failed to delete note", operation="delete", note_id=note_id) as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (note_id,))
            return cur.rowcount > 0
