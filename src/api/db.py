from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List

from .errors import NotFoundError, StorageError
from .models import TaskEntity
from .repositories import Repository, new_task_id
from .schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    text: str = "text"
    remarks: str = "remarks"
    completed: str = "completed"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()

_UPDATABLE = {_COLS.text, _COLS.remarks, _COLS.completed}


def _now_iso() -> str:
    # Fixed precision keeps lexical order equal to chronological order.
    return datetime.now().isoformat(timespec="microseconds")


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Every operation opens its own connection; any sqlite3 failure is
    surfaced as StorageError.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        except OSError as e:
            raise StorageError("init", f"Cannot create database directory for {db_path}", e) from e
        self._init_db()
        logger.info("SQLite task repository ready db=%s", db_path)

    @contextmanager
    def _conn(self, operation: str) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            logger.error("Cannot open task database db=%s op=%s: %s", self._db_path, operation, e)
            raise StorageError(operation, "Task database is unavailable", e) from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Task database failure op=%s: %s", operation, e)
            raise StorageError(operation, f"Task database {operation} failed", e) from e
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn("init") as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.text} TEXT NOT NULL,
                    {_COLS.remarks} TEXT NOT NULL DEFAULT '',
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": str(row[_COLS.id]),
            "text": str(row[_COLS.text]),
            "remarks": row[_COLS.remarks] or "",
            "completed": bool(row[_COLS.completed]),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
            "updated_at": datetime.fromisoformat(row[_COLS.updated_at]),
        }

    def _fetch(self, conn: sqlite3.Connection, task_id: str) -> TaskEntity:
        row = conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)).fetchone()
        if row is None:
            raise NotFoundError(task_id)
        return self._row_to_entity(row)

    def list_all(self) -> List[TaskEntity]:
        with self._conn("list") as conn:
            # rowid breaks created_at ties in insertion order
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.created_at} DESC, rowid DESC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def create(self, data: TaskCreate) -> TaskEntity:
        now = _now_iso()
        task_id = new_task_id()
        with self._conn("create") as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.text}, {_COLS.remarks}, {_COLS.completed},
                    {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, 0, ?, ?)
                """,
                (task_id, data.text, data.remarks, now, now),
            )
            return self._fetch(conn, task_id)

    def get(self, task_id: str) -> TaskEntity:
        with self._conn("get") as conn:
            return self._fetch(conn, task_id)

    def update(self, task_id: str, data: TaskUpdate) -> TaskEntity:
        changes = {k: v for k, v in data.changes().items() if k in _UPDATABLE}
        if _COLS.completed in changes:
            changes[_COLS.completed] = 1 if changes[_COLS.completed] else 0
        assignments = [f"{col} = ?" for col in changes] + [f"{_COLS.updated_at} = ?"]
        params = [*changes.values(), _now_iso(), task_id]
        with self._conn("update") as conn:
            cur = conn.execute(
                f"UPDATE {_COLS.table} SET {', '.join(assignments)} WHERE {_COLS.id} = ?",
                params,
            )
            if cur.rowcount == 0:
                raise NotFoundError(task_id)
            return self._fetch(conn, task_id)

    def delete(self, task_id: str) -> None:
        with self._conn("delete") as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            if cur.rowcount == 0:
                raise NotFoundError(task_id)
