from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence, Type

from task_manager.core.errors import ConflictError, OperationNotAllowedError, TaskManagerError

log = logging.getLogger("task_manager.storage")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE,
        first_name TEXT,
        last_name TEXT,
        password_digest TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS task_statuses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS labels (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        task_index INTEGER,
        title TEXT NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        status_id INTEGER NOT NULL,
        author_id INTEGER NOT NULL,
        assignee_id INTEGER,
        created_at TEXT NOT NULL,
        FOREIGN KEY(status_id) REFERENCES task_statuses(id) ON DELETE RESTRICT,
        FOREIGN KEY(author_id) REFERENCES users(id) ON DELETE RESTRICT,
        FOREIGN KEY(assignee_id) REFERENCES users(id) ON DELETE RESTRICT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS task_labels (
        task_id INTEGER NOT NULL,
        label_id INTEGER NOT NULL,
        PRIMARY KEY(task_id, label_id),
        FOREIGN KEY(task_id) REFERENCES tasks(id) ON DELETE CASCADE,
        FOREIGN KEY(label_id) REFERENCES labels(id) ON DELETE RESTRICT
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_tasks_status ON tasks(status_id)",
    "CREATE INDEX IF NOT EXISTS ix_tasks_assignee ON tasks(assignee_id)",
    "CREATE INDEX IF NOT EXISTS ix_task_labels_label ON task_labels(label_id)",
)


class Database:
    """
    SQLite store shared by all repositories.

    One connection per application; FastAPI runs sync endpoints in a
    threadpool, so every statement goes through a re-entrant lock.
    """

    def __init__(self, path: str | Path):
        raw = str(path)
        self.path = raw
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None

    def _connect(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        if self.path != ":memory:":
            conn.execute("PRAGMA journal_mode = WAL")
        self._conn = conn
        self._init_schema()
        log.info("opened database path=%s", self.path)
        return conn

    def _init_schema(self) -> None:
        conn = self._conn
        if conn is None:
            return
        for stmt in SCHEMA:
            conn.execute(stmt)
        conn.commit()

    def open(self) -> "Database":
        with self._lock:
            self._connect()
        return self

    @contextmanager
    def transaction(
        self,
        *,
        fk_error: Type[TaskManagerError] = OperationNotAllowedError,
        fk_message: str = "Operation not possible",
    ) -> Iterator[sqlite3.Connection]:
        """
        Yield the connection inside a transaction.

        Commits on success, rolls back on any exception. Unique-constraint
        violations are re-raised as ConflictError, foreign-key violations as
        `fk_error`: a row that is still referenced cannot be deleted, and a
        row cannot point at one that no longer exists.
        """
        with self._lock:
            conn = self._connect()
            try:
                yield conn
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                text = str(e).upper()
                if "UNIQUE" in text:
                    raise ConflictError(_conflict_message(e)) from e
                if "FOREIGN KEY" in text:
                    log.info("foreign key violation: %s", e)
                    raise fk_error(fk_message) from e
                raise
            except BaseException:
                conn.rollback()
                raise

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._connect().execute(sql, tuple(params)).fetchall()

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self._connect().execute(sql, tuple(params)).fetchone()

    def ping(self) -> bool:
        try:
            self.query_one("SELECT 1")
            return True
        except sqlite3.Error:
            log.warning("database ping failed path=%s", self.path, exc_info=True)
            return False

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


def _conflict_message(err: sqlite3.IntegrityError) -> str:
    # sqlite: "UNIQUE constraint failed: users.email"
    text = str(err)
    if ":" in text:
        column = text.split(":", 1)[1].strip()
        table, _, field_name = column.partition(".")
        if field_name:
            return f"{table} with this {field_name} already exists"
    return "Resource already exists"
