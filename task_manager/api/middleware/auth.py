# task_manager/api/middleware/auth.py
from __future__ import annotations

import logging
import re
from typing import Callable, List, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from task_manager.api.observability.metrics import AUTHN_DECISIONS_TOTAL, route_template
from task_manager.core.auth.models import Principal
from task_manager.core.auth.tokens import AuthError, TokenService, extract_bearer

log = logging.getLogger("task_manager.auth")

ANONYMOUS = Principal(subject="anonymous", anonymous=True)

_UNGUARDED_PREFIXES = ("/docs", "/redoc", "/openapi.json", "/metrics", "/health")


def public_routes(base_url: str) -> List[Tuple[str, re.Pattern]]:
    """(method, pattern) pairs reachable without a token. Method "*" matches any."""
    b = re.escape(base_url)
    return [
        ("POST", re.compile(rf"^{b}/login/?$")),
        ("POST", re.compile(rf"^{b}/users/?$")),
        ("GET", re.compile(rf"^{b}/health/(live|ready)$")),
    ]


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Bearer-token boundary for everything under the API base URL.

    Paths outside the base URL (docs, /metrics, /health) are not guarded.
    """

    def __init__(
        self,
        app,
        *,
        tokens: TokenService,
        base_url: str = "/api",
        enabled: bool = True,
        disabled_subject: str = "anonymous",
    ):
        super().__init__(app)
        self.tokens = tokens
        self.base_url = base_url
        self.enabled = enabled
        self.disabled_subject = disabled_subject
        self._public = public_routes(base_url)

    def _is_guarded(self, path: str) -> bool:
        if path.startswith(_UNGUARDED_PREFIXES):
            return False
        if not self.base_url:
            return True
        return path == self.base_url or path.startswith(self.base_url + "/")

    def _is_public(self, method: str, path: str) -> bool:
        return any((m == "*" or m == method) and pat.match(path) for m, pat in self._public)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        method = request.method.upper()

        # Auth disabled (dev-only): everyone acts as the configured subject
        if not self.enabled:
            request.state.principal = Principal(subject=self.disabled_subject)
            return await call_next(request)

        if method == "OPTIONS" or not self._is_guarded(path):
            request.state.principal = ANONYMOUS
            return await call_next(request)

        try:
            principal = self.tokens.decode(extract_bearer(request.headers))
        except AuthError as e:
            if self._is_public(method, path):
                request.state.principal = ANONYMOUS
                return await call_next(request)

            AUTHN_DECISIONS_TOTAL.labels(decision="deny", method=method, path=route_template(request)).inc()
            log.info("authn deny method=%s path=%s reason=%s", method, path, str(e))
            return JSONResponse(
                status_code=401,
                content={"detail": str(e)},
                headers={"WWW-Authenticate": "Bearer"},
            )

        AUTHN_DECISIONS_TOTAL.labels(decision="allow", method=method, path=route_template(request)).inc()
        request.state.principal = principal
        return await call_next(request)
