from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from task_manager.core.auth.passwords import hash_password
from task_manager.core.errors import OperationNotAllowedError, ResourceNotFoundError
from task_manager.core.models import User
from task_manager.core.storage import Store

log = logging.getLogger("task_manager.users")


class UserService:
    def __init__(self, store: Store):
        self.store = store

    def get_all(self) -> List[User]:
        return self.store.users.list()

    def find_by_id(self, user_id: int) -> User:
        user = self.store.users.get(user_id)
        if user is None:
            raise ResourceNotFoundError(f"User with id {user_id} not found")
        return user

    def create(
        self,
        *,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        user = self.store.users.create(
            email=email,
            password_digest=hash_password(password),
            first_name=first_name,
            last_name=last_name,
        )
        log.info("user created id=%s", user.id)
        return user

    def update(self, user_id: int, changes: Dict[str, Any]) -> User:
        """
        Partial update. Keys: email, first_name, last_name, password.
        A new password is stored as a fresh digest.
        """
        self.find_by_id(user_id)
        fields = {k: v for k, v in changes.items() if k != "password"}
        if changes.get("password") is not None:
            fields["password_digest"] = hash_password(changes["password"])
        user = self.store.users.update(user_id, fields)
        if user is None:
            raise ResourceNotFoundError(f"User with id {user_id} not found")
        return user

    def delete(self, user_id: int) -> None:
        self.find_by_id(user_id)
        if self.store.users.has_tasks(user_id):
            raise OperationNotAllowedError()
        self.store.users.delete(user_id)
        log.info("user deleted id=%s", user_id)
