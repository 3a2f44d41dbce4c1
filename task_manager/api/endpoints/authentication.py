from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from task_manager.api.deps import authentication_service
from task_manager.api.schemas.auth import AuthRequest
from task_manager.core.services.authentication import AuthenticationService

router = APIRouter(tags=["authentication"])


@router.post(
    "/login",
    response_class=PlainTextResponse,
    summary="Authenticates the user",
    responses={401: {"description": "Unauthorized"}},
)
def login(
    body: AuthRequest,
    svc: AuthenticationService = Depends(authentication_service),
) -> PlainTextResponse:
    """Returns a JWT bearer token as plain text."""
    return PlainTextResponse(svc.login(body.username, body.password))
