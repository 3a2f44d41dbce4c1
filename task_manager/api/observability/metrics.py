from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram
from starlette.requests import Request
from starlette.routing import Match

UNMATCHED_ROUTE = "<unmatched>"


def route_template(request: Request) -> str:
    """
    Path template of the route serving this request, e.g. /api/tasks/{task_id}.

    Used as the metrics `path` label so label cardinality is bounded by the
    number of routes. Requests that match no route share UNMATCHED_ROUTE.
    """
    route = request.scope.get("route")
    if route is not None and getattr(route, "path", None):
        return route.path

    app = request.scope.get("app")
    partial = None
    for candidate in getattr(getattr(app, "router", None), "routes", []):
        match, _ = candidate.matches(request.scope)
        if match == Match.FULL:
            return candidate.path
        if match == Match.PARTIAL and partial is None:
            partial = candidate.path
    return partial or UNMATCHED_ROUTE


HTTP_REQUESTS_TOTAL = Counter(
    "task_manager_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "task_manager_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

AUTHN_DECISIONS_TOTAL = Counter(
    "task_manager_authn_decisions_total",
    "Authentication decisions at the API boundary",
    ["decision", "method", "path"],
)

UNHANDLED_ERRORS_TOTAL = Counter(
    "task_manager_unhandled_errors_total",
    "Requests that ended in an unhandled exception (HTTP 500)",
    ["method", "path", "exception"],
)

STORED_RESOURCES = Gauge(
    "task_manager_stored_resources",
    "Rows currently stored, per resource; refreshed on each scrape",
    ["resource"],
)
