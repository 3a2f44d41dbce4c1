from __future__ import annotations

import sqlite3
from typing import Iterable, List, Optional

from task_manager.core.models import Label
from task_manager.core.storage.db import Database, _utc_now_iso


def _row_to_label(row: sqlite3.Row) -> Label:
    return Label(id=row["id"], name=row["name"], created_at=row["created_at"])


class LabelRepository:
    def __init__(self, db: Database):
        self.db = db

    def list(self) -> List[Label]:
        return [_row_to_label(r) for r in self.db.query("SELECT * FROM labels ORDER BY id")]

    def get(self, label_id: int) -> Optional[Label]:
        row = self.db.query_one("SELECT * FROM labels WHERE id=?", (label_id,))
        return _row_to_label(row) if row else None

    def find_by_name(self, name: str) -> Optional[Label]:
        row = self.db.query_one("SELECT * FROM labels WHERE name=?", (name,))
        return _row_to_label(row) if row else None

    def find_by_ids(self, label_ids: Iterable[int]) -> List[Label]:
        ids = sorted(set(label_ids))
        if not ids:
            return []
        marks = ", ".join("?" for _ in ids)
        rows = self.db.query(f"SELECT * FROM labels WHERE id IN ({marks}) ORDER BY id", ids)
        return [_row_to_label(r) for r in rows]

    def create(self, *, name: str) -> Label:
        with self.db.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO labels(name, created_at) VALUES(?, ?)",
                (name, _utc_now_iso()),
            )
            label_id = cur.lastrowid
        return self.get(label_id)  # type: ignore[return-value]

    def rename(self, label_id: int, name: str) -> Optional[Label]:
        with self.db.transaction() as conn:
            conn.execute("UPDATE labels SET name=? WHERE id=?", (name, label_id))
        return self.get(label_id)

    def delete(self, label_id: int) -> bool:
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM labels WHERE id=?", (label_id,))
            return cur.rowcount > 0

    def is_in_use(self, label_id: int) -> bool:
        return self.db.query_one("SELECT 1 FROM task_labels WHERE label_id=? LIMIT 1", (label_id,)) is not None
