from __future__ import annotations

from typing import List

from task_manager.core.errors import OperationNotAllowedError, ResourceNotFoundError
from task_manager.core.models import Label
from task_manager.core.storage import Store


class LabelService:
    def __init__(self, store: Store):
        self.store = store

    def get_all(self) -> List[Label]:
        return self.store.labels.list()

    def find_by_id(self, label_id: int) -> Label:
        label = self.store.labels.get(label_id)
        if label is None:
            raise ResourceNotFoundError(f"Label with id {label_id} not found")
        return label

    def create(self, *, name: str) -> Label:
        return self.store.labels.create(name=name)

    def update(self, label_id: int, *, name: str | None = None) -> Label:
        label = self.find_by_id(label_id)
        if name is None:
            return label
        return self.store.labels.rename(label_id, name)  # type: ignore[return-value]

    def delete(self, label_id: int) -> None:
        self.find_by_id(label_id)
        if self.store.labels.is_in_use(label_id):
            raise OperationNotAllowedError()
        self.store.labels.delete(label_id)
