from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from task_manager.api.observability.metrics import UNHANDLED_ERRORS_TOTAL, route_template

log = logging.getLogger("task_manager.errors")

INTERNAL_ERROR_DETAIL = "Internal Server Error"


def _caller(request: Request) -> Optional[str]:
    principal = getattr(request.state, "principal", None)
    if principal is None or principal.anonymous:
        return None
    return principal.subject


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    Last line of defence for the task API.

    Domain errors (404/405/409/400/401) are rendered by the app's exception
    handlers and never reach this layer. Whatever does reach it, a storage
    failure or a bug, becomes a 500 whose body only carries the request id a
    user can quote; the traceback, the route and the calling user go to the
    `task_manager.errors` log and a Prometheus counter.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            rid = getattr(request.state, "request_id", None) or request.headers.get("x-request-id")
            route = route_template(request)
            UNHANDLED_ERRORS_TOTAL.labels(
                method=request.method.upper(),
                path=route,
                exception=type(exc).__name__,
            ).inc()
            log.exception(
                "unhandled %s on %s %s rid=%s user=%s",
                type(exc).__name__,
                request.method,
                route,
                rid,
                _caller(request),
            )

            payload: Dict[str, Any] = {"detail": INTERNAL_ERROR_DETAIL}
            if rid:
                payload["request_id"] = rid
            return JSONResponse(status_code=500, content=payload)
