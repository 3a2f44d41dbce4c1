from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional

from task_manager.core.models import User
from task_manager.core.storage.db import Database, _utc_now_iso

# API field -> column
_UPDATABLE = {
    "email": "email",
    "first_name": "first_name",
    "last_name": "last_name",
    "password_digest": "password_digest",
}


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        password_digest=row["password_digest"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class UserRepository:
    def __init__(self, db: Database):
        self.db = db

    def list(self) -> List[User]:
        return [_row_to_user(r) for r in self.db.query("SELECT * FROM users ORDER BY id")]

    def get(self, user_id: int) -> Optional[User]:
        row = self.db.query_one("SELECT * FROM users WHERE id=?", (user_id,))
        return _row_to_user(row) if row else None

    def find_by_email(self, email: str) -> Optional[User]:
        row = self.db.query_one("SELECT * FROM users WHERE email=?", (email,))
        return _row_to_user(row) if row else None

    def create(
        self,
        *,
        email: str,
        password_digest: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        now = _utc_now_iso()
        with self.db.transaction() as conn:
            cur = conn.execute(
                """
                INSERT INTO users(email, first_name, last_name, password_digest, created_at, updated_at)
                VALUES(?, ?, ?, ?, ?, ?)
                """,
                (email, first_name, last_name, password_digest, now, now),
            )
            user_id = cur.lastrowid
        return self.get(user_id)  # type: ignore[return-value]

    def update(self, user_id: int, fields: Dict[str, Any]) -> Optional[User]:
        sets = []
        params: List[Any] = []
        for k, v in fields.items():
            if k not in _UPDATABLE:
                raise AttributeError(f"User has no updatable field: {k}")
            sets.append(f"{_UPDATABLE[k]}=?")
            params.append(v)
        sets.append("updated_at=?")
        params.append(_utc_now_iso())
        params.append(user_id)

        with self.db.transaction() as conn:
            conn.execute(f"UPDATE users SET {', '.join(sets)} WHERE id=?", params)
        return self.get(user_id)

    def delete(self, user_id: int) -> bool:
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM users WHERE id=?", (user_id,))
            return cur.rowcount > 0

    def has_tasks(self, user_id: int) -> bool:
        row = self.db.query_one(
            "SELECT 1 FROM tasks WHERE author_id=? OR assignee_id=? LIMIT 1",
            (user_id, user_id),
        )
        return row is not None
