from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPBearer

from task_manager.core.auth.models import Principal
from task_manager.core.auth.tokens import AuthError, TokenService
from task_manager.core.services.authentication import AuthenticationService
from task_manager.core.services.labels import LabelService
from task_manager.core.services.task_statuses import TaskStatusService
from task_manager.core.services.tasks import TaskService
from task_manager.core.services.users import UserService
from task_manager.core.storage import Store


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_tokens(request: Request) -> TokenService:
    return request.app.state.tokens


def current_principal(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if principal is None or principal.anonymous:
        raise AuthError("Authentication required")
    return principal


def user_service(store: Store = Depends(get_store)) -> UserService:
    return UserService(store)


def task_status_service(store: Store = Depends(get_store)) -> TaskStatusService:
    return TaskStatusService(store)


def label_service(store: Store = Depends(get_store)) -> LabelService:
    return LabelService(store)


def task_service(store: Store = Depends(get_store)) -> TaskService:
    return TaskService(store)


def authentication_service(
    store: Store = Depends(get_store),
    tokens: TokenService = Depends(get_tokens),
) -> AuthenticationService:
    return AuthenticationService(store, tokens)


# Documents the bearer scheme in OpenAPI; enforcement lives in AuthMiddleware.
bearer_scheme = HTTPBearer(auto_error=False, bearerFormat="JWT", description="Token from POST /login")
