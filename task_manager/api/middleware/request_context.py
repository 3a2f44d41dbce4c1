from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Dict, Iterable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from task_manager.api.observability.metrics import (
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION_SECONDS,
    route_template,
)

log = logging.getLogger("task_manager.request")


def _json_log(event: str, **fields):
    # Structured log in a single line; tokens are never logged.
    msg = {"event": event, **fields}
    log.info("%s", msg)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Request ID + Prometheus metrics + one structured log line per API request.

    Adds:
      request.state.request_id
      response header: X-Request-Id
    """

    def __init__(self, app, *, base_url: str = "/api"):
        super().__init__(app)
        self.base_url = base_url

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = rid

        start = time.time()
        resp = await call_next(request)
        dur_ms = int((time.time() - start) * 1000)

        resp.headers["X-Request-Id"] = rid

        # Prometheus metrics (low-cardinality path)
        p = route_template(request)
        m = request.method.upper()
        s = str(getattr(resp, "status_code", 0))
        HTTP_REQUESTS_TOTAL.labels(method=m, path=p, status=s).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=m, path=p).observe(dur_ms / 1000.0)

        if request.url.path.startswith(self.base_url + "/"):
            principal = getattr(request.state, "principal", None)
            _json_log(
                "request",
                request_id=rid,
                method=request.method,
                path=request.url.path,
                status_code=resp.status_code,
                duration_ms=dur_ms,
                sub=None if principal is None or principal.anonymous else principal.subject,
            )
        return resp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Security headers (enabled in prod by default)."""

    def __init__(self, app, enabled: bool = True):
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        resp = await call_next(request)
        if not self.enabled:
            return resp

        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        resp.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        return resp


class FixedWindowCounter:
    """
    Per-key request counts in one-minute windows.

    Only the current window is kept: when the minute rolls over, every
    older entry is dropped, so memory is bounded by the keys seen within
    one minute.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._window: Optional[int] = None
        self._counts: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._counts)

    def hit(self, key: str) -> int:
        """Count one request for `key` and return its total in the current window."""
        minute = int(self._clock() // 60)
        if minute != self._window:
            self._window = minute
            self._counts = {}
        self._counts[key] = self._counts.get(key, 0) + 1
        return self._counts[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Small in-memory fixed-window rate limit (best-effort, per process).
    Controlled by:
      TASK_MANAGER_RATE_LIMIT_ENABLED=true/false
      TASK_MANAGER_RATE_LIMIT_RPM=120  (requests per minute)
      TASK_MANAGER_TRUSTED_PROXIES=10.0.0.1,10.0.0.2

    Clients are keyed by peer address. X-Forwarded-For is honoured only when
    the peer is a trusted proxy; otherwise any client could rotate the header
    to get a fresh budget.
    """

    def __init__(
        self,
        app,
        enabled: bool = False,
        rpm: int = 120,
        base_url: str = "/api",
        trusted_proxies: Iterable[str] = (),
    ):
        super().__init__(app)
        self.enabled = enabled
        self.rpm = max(1, int(rpm))
        self.base_url = base_url
        self.trusted_proxies = frozenset(trusted_proxies)
        self._counter = FixedWindowCounter()

    def _key(self, request: Request) -> str:
        peer = request.client.host if request.client else "unknown"
        if peer in self.trusted_proxies:
            xf = request.headers.get("x-forwarded-for")
            if xf and xf.split(",")[0].strip():
                return xf.split(",")[0].strip()
        return peer

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled:
            return await call_next(request)

        # Only rate limit API surface
        if not request.url.path.startswith(self.base_url + "/"):
            return await call_next(request)

        if self._counter.hit(self._key(request)) > self.rpm:
            return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})

        return await call_next(request)
