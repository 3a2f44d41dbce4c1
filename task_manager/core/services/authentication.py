from __future__ import annotations

import logging

from task_manager.core.auth.passwords import verify_password
from task_manager.core.auth.tokens import AuthError, TokenService
from task_manager.core.storage import Store

log = logging.getLogger("task_manager.auth")


class AuthenticationService:
    def __init__(self, store: Store, tokens: TokenService):
        self.store = store
        self.tokens = tokens

    def login(self, username: str, password: str) -> str:
        """Return a bearer token for valid credentials, else raise AuthError."""
        user = self.store.users.find_by_email(username)
        if user is None or not verify_password(password, user.password_digest):
            log.info("login failed")
            raise AuthError("Bad credentials")
        log.info("login ok user_id=%s", user.id)
        return self.tokens.issue(user.email)
