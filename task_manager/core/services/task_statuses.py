from __future__ import annotations

from typing import Any, Dict, List

from task_manager.core.errors import OperationNotAllowedError, ResourceNotFoundError
from task_manager.core.models import TaskStatus
from task_manager.core.storage import Store


class TaskStatusService:
    def __init__(self, store: Store):
        self.store = store

    def get_all(self) -> List[TaskStatus]:
        return self.store.task_statuses.list()

    def find_by_id(self, status_id: int) -> TaskStatus:
        status = self.store.task_statuses.get(status_id)
        if status is None:
            raise ResourceNotFoundError(f"TaskStatus with id {status_id} not found")
        return status

    def create(self, *, name: str, slug: str) -> TaskStatus:
        return self.store.task_statuses.create(name=name, slug=slug)

    def update(self, status_id: int, changes: Dict[str, Any]) -> TaskStatus:
        self.find_by_id(status_id)
        return self.store.task_statuses.update(status_id, changes)  # type: ignore[return-value]

    def delete(self, status_id: int) -> None:
        self.find_by_id(status_id)
        if self.store.task_statuses.is_in_use(status_id):
            raise OperationNotAllowedError()
        self.store.task_statuses.delete(status_id)
