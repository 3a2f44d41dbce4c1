from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Tuple

from task_manager.core.errors import InvalidReferenceError
from task_manager.core.models import Task, TaskFilter
from task_manager.core.storage.db import Database, _utc_now_iso

_SELECT = """
    SELECT t.id, t.task_index, t.title, t.content, t.author_id, t.assignee_id,
           t.created_at, s.slug AS status_slug
    FROM tasks t
    JOIN task_statuses s ON s.id = t.status_id
"""

_STALE_REFERENCE = "Referenced status, user or label no longer exists"

_UPDATABLE = {
    "index": "task_index",
    "title": "title",
    "content": "content",
    "status_id": "status_id",
    "assignee_id": "assignee_id",
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_filter_clause(flt: TaskFilter) -> Tuple[str, List[Any]]:
    """
    Translate a TaskFilter into a WHERE clause over the `t` / `s` aliases.

    Returns ("", []) when nothing constrains the listing.
    """
    clauses: List[str] = []
    params: List[Any] = []

    if flt.title_cont:
        clauses.append("LOWER(t.title) LIKE ? ESCAPE '\\'")
        params.append(f"%{_escape_like(flt.title_cont.lower())}%")
    if flt.assignee_id is not None:
        clauses.append("t.assignee_id = ?")
        params.append(flt.assignee_id)
    if flt.status:
        clauses.append("s.slug = ?")
        params.append(flt.status)
    if flt.label_id is not None:
        clauses.append("EXISTS (SELECT 1 FROM task_labels tl WHERE tl.task_id = t.id AND tl.label_id = ?)")
        params.append(flt.label_id)

    if not clauses:
        return "", []
    return "WHERE " + " AND ".join(clauses), params


class TaskRepository:
    def __init__(self, db: Database):
        self.db = db

    def _label_ids(self, task_ids: Sequence[int]) -> Dict[int, List[int]]:
        out: Dict[int, List[int]] = {tid: [] for tid in task_ids}
        if not task_ids:
            return out
        marks = ", ".join("?" for _ in task_ids)
        rows = self.db.query(
            f"SELECT task_id, label_id FROM task_labels WHERE task_id IN ({marks}) ORDER BY label_id",
            list(task_ids),
        )
        for r in rows:
            out[r["task_id"]].append(r["label_id"])
        return out

    def _hydrate(self, rows: List[sqlite3.Row]) -> List[Task]:
        labels = self._label_ids([r["id"] for r in rows])
        return [
            Task(
                id=r["id"],
                index=r["task_index"],
                title=r["title"],
                content=r["content"],
                status=r["status_slug"],
                author_id=r["author_id"],
                assignee_id=r["assignee_id"],
                created_at=r["created_at"],
                label_ids=labels.get(r["id"], []),
            )
            for r in rows
        ]

    def list(self, flt: Optional[TaskFilter] = None) -> List[Task]:
        where, params = build_filter_clause(flt or TaskFilter())
        rows = self.db.query(f"{_SELECT} {where} ORDER BY t.id", params)
        return self._hydrate(rows)

    def get(self, task_id: int) -> Optional[Task]:
        rows = self.db.query(f"{_SELECT} WHERE t.id = ?", (task_id,))
        found = self._hydrate(rows)
        return found[0] if found else None

    def create(
        self,
        *,
        title: str,
        content: str,
        status_id: int,
        author_id: int,
        index: Optional[int] = None,
        assignee_id: Optional[int] = None,
        label_ids: Sequence[int] = (),
    ) -> Task:
        with self.db.transaction(fk_error=InvalidReferenceError, fk_message=_STALE_REFERENCE) as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(task_index, title, content, status_id, author_id, assignee_id, created_at)
                VALUES(?, ?, ?, ?, ?, ?, ?)
                """,
                (index, title, content, status_id, author_id, assignee_id, _utc_now_iso()),
            )
            task_id = cur.lastrowid
            conn.executemany(
                "INSERT INTO task_labels(task_id, label_id) VALUES(?, ?)",
                [(task_id, lid) for lid in sorted(set(label_ids))],
            )
        return self.get(task_id)  # type: ignore[return-value]

    def update(
        self,
        task_id: int,
        fields: Dict[str, Any],
        label_ids: Optional[Sequence[int]] = None,
    ) -> Optional[Task]:
        """
        Apply column updates and, when label_ids is not None, replace the
        task's label set. Both happen in one transaction.
        """
        for k in fields:
            if k not in _UPDATABLE:
                raise AttributeError(f"Task has no updatable field: {k}")

        with self.db.transaction(fk_error=InvalidReferenceError, fk_message=_STALE_REFERENCE) as conn:
            if fields:
                sets = ", ".join(f"{_UPDATABLE[k]}=?" for k in fields)
                conn.execute(f"UPDATE tasks SET {sets} WHERE id=?", (*fields.values(), task_id))
            if label_ids is not None:
                conn.execute("DELETE FROM task_labels WHERE task_id=?", (task_id,))
                conn.executemany(
                    "INSERT INTO task_labels(task_id, label_id) VALUES(?, ?)",
                    [(task_id, lid) for lid in sorted(set(label_ids))],
                )
        return self.get(task_id)

    def delete(self, task_id: int) -> bool:
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id=?", (task_id,))
            return cur.rowcount > 0
