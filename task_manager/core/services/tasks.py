from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from task_manager.core.auth.tokens import AuthError
from task_manager.core.errors import InvalidReferenceError, ResourceNotFoundError
from task_manager.core.models import Task, TaskFilter
from task_manager.core.storage import Store

log = logging.getLogger("task_manager.tasks")


class TaskService:
    """
    Task use-cases. Status is addressed by slug, assignee and labels by id;
    unknown references are rejected instead of silently dropped.
    """

    def __init__(self, store: Store):
        self.store = store

    def get_all(self, flt: Optional[TaskFilter] = None) -> List[Task]:
        return self.store.tasks.list(flt)

    def find_by_id(self, task_id: int) -> Task:
        task = self.store.tasks.get(task_id)
        if task is None:
            raise ResourceNotFoundError(f"Task with id {task_id} not found")
        return task

    def _status_id(self, slug: str) -> int:
        status = self.store.task_statuses.find_by_slug(slug)
        if status is None:
            raise InvalidReferenceError(f"TaskStatus with slug {slug} not found")
        return status.id

    def _assignee_id(self, user_id: Optional[int]) -> Optional[int]:
        if user_id is None:
            return None
        if self.store.users.get(user_id) is None:
            raise InvalidReferenceError(f"User with id {user_id} not found")
        return user_id

    def _label_ids(self, label_ids: Iterable[int]) -> List[int]:
        wanted = sorted(set(label_ids))
        found = {label.id for label in self.store.labels.find_by_ids(wanted)}
        missing = [i for i in wanted if i not in found]
        if missing:
            raise InvalidReferenceError(f"Labels not found: {', '.join(str(i) for i in missing)}")
        return wanted

    def create(
        self,
        *,
        author_email: str,
        title: str,
        status: str,
        content: Optional[str] = None,
        index: Optional[int] = None,
        assignee_id: Optional[int] = None,
        label_ids: Optional[Iterable[int]] = None,
    ) -> Task:
        author = self.store.users.find_by_email(author_email)
        if author is None:
            raise AuthError("Unknown user")

        task = self.store.tasks.create(
            title=title,
            content=content if content is not None else "",
            status_id=self._status_id(status),
            author_id=author.id,
            index=index,
            assignee_id=self._assignee_id(assignee_id),
            label_ids=self._label_ids(label_ids or ()),
        )
        log.info("task created id=%s author=%s", task.id, author.id)
        return task

    def update(self, task_id: int, changes: Dict[str, Any]) -> Task:
        """
        Partial update. Keys present in `changes` are applied, absent keys kept.
        Keys: index, title, content, status, assignee_id, label_ids.
        """
        self.find_by_id(task_id)

        fields: Dict[str, Any] = {}
        for key in ("index", "title", "content"):
            if key in changes:
                fields[key] = changes[key]
        if "content" in fields and fields["content"] is None:
            fields["content"] = ""
        if "status" in changes:
            fields["status_id"] = self._status_id(changes["status"])
        if "assignee_id" in changes:
            fields["assignee_id"] = self._assignee_id(changes["assignee_id"])

        label_ids = None
        if "label_ids" in changes:
            label_ids = self._label_ids(changes["label_ids"] or [])

        return self.store.tasks.update(task_id, fields, label_ids=label_ids)  # type: ignore[return-value]

    def delete(self, task_id: int) -> None:
        self.find_by_id(task_id)
        self.store.tasks.delete(task_id)
        log.info("task deleted id=%s", task_id)
