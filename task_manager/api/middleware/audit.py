from __future__ import annotations

from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from task_manager.core.observability.audit import AuditLog, action_for


def _extract_actor(request: Request) -> Optional[str]:
    principal = getattr(request.state, "principal", None)
    if principal is not None and not principal.anonymous:
        return principal.subject
    return None


def resource_of(path: str, base_url: str) -> Tuple[Optional[str], Optional[int]]:
    """'/api/tasks/7' -> ('tasks', 7); '/api/labels' -> ('labels', None)."""
    rest = path[len(base_url):] if base_url and path.startswith(base_url) else path
    parts = [p for p in rest.split("/") if p]
    if not parts:
        return None, None
    resource_id = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else None
    return parts[0], resource_id


class AuditMiddleware(BaseHTTPMiddleware):
    """Writes one audit entry per mutating request under the API base URL."""

    def __init__(self, app, *, audit: Optional[AuditLog], base_url: str = "/api"):
        super().__init__(app)
        self.audit = audit
        self.base_url = base_url

    async def dispatch(self, request: Request, call_next):
        if self.audit is None or request.method.upper() in ("GET", "HEAD", "OPTIONS"):
            return await call_next(request)
        path = request.url.path
        if self.base_url and not (path == self.base_url or path.startswith(self.base_url + "/")):
            return await call_next(request)

        resource, resource_id = resource_of(path, self.base_url)
        response: Optional[Response] = None
        try:
            response = await call_next(request)
            return response
        finally:
            self.audit.record(
                action=action_for(request.method, resource),
                resource=resource,
                resource_id=resource_id,
                actor=_extract_actor(request),
                status_code=response.status_code if response is not None else 500,
                request_id=getattr(request.state, "request_id", None),
            )
