from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional

from task_manager.core.models import TaskStatus
from task_manager.core.storage.db import Database, _utc_now_iso

_UPDATABLE = ("name", "slug")


def _row_to_status(row: sqlite3.Row) -> TaskStatus:
    return TaskStatus(id=row["id"], name=row["name"], slug=row["slug"], created_at=row["created_at"])


class TaskStatusRepository:
    def __init__(self, db: Database):
        self.db = db

    def list(self) -> List[TaskStatus]:
        return [_row_to_status(r) for r in self.db.query("SELECT * FROM task_statuses ORDER BY id")]

    def get(self, status_id: int) -> Optional[TaskStatus]:
        row = self.db.query_one("SELECT * FROM task_statuses WHERE id=?", (status_id,))
        return _row_to_status(row) if row else None

    def find_by_slug(self, slug: str) -> Optional[TaskStatus]:
        row = self.db.query_one("SELECT * FROM task_statuses WHERE slug=?", (slug,))
        return _row_to_status(row) if row else None

    def create(self, *, name: str, slug: str) -> TaskStatus:
        with self.db.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO task_statuses(name, slug, created_at) VALUES(?, ?, ?)",
                (name, slug, _utc_now_iso()),
            )
            status_id = cur.lastrowid
        return self.get(status_id)  # type: ignore[return-value]

    def update(self, status_id: int, fields: Dict[str, Any]) -> Optional[TaskStatus]:
        if not fields:
            return self.get(status_id)
        for k in fields:
            if k not in _UPDATABLE:
                raise AttributeError(f"TaskStatus has no updatable field: {k}")
        sets = ", ".join(f"{k}=?" for k in fields)
        with self.db.transaction() as conn:
            conn.execute(f"UPDATE task_statuses SET {sets} WHERE id=?", (*fields.values(), status_id))
        return self.get(status_id)

    def delete(self, status_id: int) -> bool:
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM task_statuses WHERE id=?", (status_id,))
            return cur.rowcount > 0

    def is_in_use(self, status_id: int) -> bool:
        return self.db.query_one("SELECT 1 FROM tasks WHERE status_id=? LIMIT 1", (status_id,)) is not None
