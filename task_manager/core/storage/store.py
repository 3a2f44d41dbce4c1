from __future__ import annotations

from pathlib import Path
from typing import Dict

from task_manager.core.storage.db import Database
from task_manager.core.storage.labels import LabelRepository
from task_manager.core.storage.task_statuses import TaskStatusRepository
from task_manager.core.storage.tasks import TaskRepository
from task_manager.core.storage.users import UserRepository


RESOURCE_TABLES = ("users", "task_statuses", "labels", "tasks")


class Store:
    """Repositories sharing one Database."""

    def __init__(self, db: Database):
        self.db = db
        self.users = UserRepository(db)
        self.task_statuses = TaskStatusRepository(db)
        self.labels = LabelRepository(db)
        self.tasks = TaskRepository(db)

    def counts(self) -> Dict[str, int]:
        """Row count per resource table."""
        return {
            table: self.db.query_one(f"SELECT COUNT(*) AS n FROM {table}")["n"]
            for table in RESOURCE_TABLES
        }

    def close(self) -> None:
        self.db.close()


def open_store(path: str | Path) -> Store:
    return Store(Database(path).open())
