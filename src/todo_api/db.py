from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generator, List

from .errors import NotFoundError, StorageError
from .models import TodoEntity
from .repositories import Repository
from .schemas import TodoUpdate


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    completed: str = "completed"
    created_at: str = "created_at"


_COLS = _Cols()

_SELECT = (
    f"SELECT {_COLS.id}, {_COLS.title}, {_COLS.completed}, {_COLS.created_at} FROM {_COLS.table}"
)


class SQLiteRepository(Repository):
    """
    SQLite repository implementing the Repository interface.

    A connection is opened per operation; every statement relies on SQLite's
    own atomicity, no transaction spans more than one call. Driver errors are
    re-raised as StorageError carrying the driver message.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        except OSError as e:
            raise StorageError(str(e)) from e
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        # Out-of-range integers and unencodable text fail in the driver before SQLite sees them
        except (sqlite3.Error, OverflowError, UnicodeEncodeError) as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.completed} BOOLEAN NOT NULL DEFAULT false,
                    {_COLS.created_at} DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        # CURRENT_TIMESTAMP is UTC, formatted 'YYYY-MM-DD HH:MM:SS'
        created_at = datetime.fromisoformat(str(row[_COLS.created_at]))
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "completed": bool(row[_COLS.completed]),
            "created_at": created_at,
        }

    def _fetch(self, conn: sqlite3.Connection, todo_id: int) -> TodoEntity:
        row = conn.execute(f"{_SELECT} WHERE {_COLS.id} = ?", (todo_id,)).fetchone()
        if row is None:
            raise NotFoundError(todo_id)
        return self._row_to_entity(row)

    def get_all(self) -> List[TodoEntity]:
        with self._conn() as conn:
            return [self._row_to_entity(r) for r in conn.execute(_SELECT).fetchall()]

    def get(self, todo_id: int) -> TodoEntity:
        with self._conn() as conn:
            return self._fetch(conn, todo_id)

    def create(self, title: str) -> TodoEntity:
        with self._conn() as conn:
            cur = conn.execute(f"INSERT INTO {_COLS.table} ({_COLS.title}) VALUES (?)", (title,))
            new_id = cur.lastrowid
            conn.commit()
            return self._fetch(conn, new_id)

    def update(self, todo: TodoUpdate) -> bool:
        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE {_COLS.table} SET {_COLS.title} = ?, {_COLS.completed} = ? WHERE {_COLS.id} = ?",
                (todo.title, todo.completed, todo.id),
            )
            return cur.rowcount > 0

    def delete(self, todo_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,))
            return cur.rowcount > 0
