"""
Prometheus Metrics Module

Provides application metrics using the prometheus_client library.
Metrics are exposed at /metrics endpoint for Prometheus scraping.
"""

import time
from collections.abc import Callable

from prometheus_client import Counter, Gauge, Histogram, Info
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# =============================================================================
# Application Info
# =============================================================================

APP_INFO = Info("folio_app", "devfolio application information")


def set_app_info(version: str, environment: str) -> None:
    """Set application info labels."""
    APP_INFO.info({"version": version, "environment": environment})


# =============================================================================
# HTTP Request Metrics
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "folio_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "folio_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# =============================================================================
# Hosted Backend Metrics
# =============================================================================

BACKEND_CALLS_TOTAL = Counter(
    "folio_backend_calls_total",
    "Total hosted backend calls",
    ["operation", "outcome"],  # outcome: ok, rejected, timeout, error
)

BACKEND_CALL_DURATION_SECONDS = Histogram(
    "folio_backend_call_duration_seconds",
    "Hosted backend call duration in seconds",
    ["operation"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# =============================================================================
# View Tracking Metrics
# =============================================================================

VIEW_EVENTS_TOTAL = Counter(
    "folio_view_events_total",
    "Blog view tracking attempts by outcome",
    ["outcome"],  # tracked, gated, failed
)

IP_LOOKUP_FALLBACKS_TOTAL = Counter(
    "folio_ip_lookup_fallbacks_total",
    "IP lookups that fell back to the user-agent fingerprint",
)

# Redis connectivity, set by RedisStore on connect
REDIS_CONNECTED = Gauge(
    "folio_redis_connected",
    "Redis connection status (1 = connected, 0 = disconnected)",
    ["role"],  # "browser" or "tab"
)

# =============================================================================
# Content Metrics
# =============================================================================

CONTENT_OPERATIONS_TOTAL = Counter(
    "folio_content_operations_total",
    "Total content operations",
    ["resource", "operation"],  # resource: blog, project, message
)

# =============================================================================
# Prometheus Metrics Middleware
# =============================================================================


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    HTTP request count and latency per route template.

    Endpoints are route templates ("/api/blogs/{blog_id}"); requests that
    match no route are counted as "unmatched".
    """

    EXCLUDED_PATHS = frozenset({"/metrics", "/health", "/favicon.ico"})

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            endpoint = getattr(route, "path", "unmatched")
            HTTP_REQUEST_DURATION_SECONDS.labels(method=request.method, endpoint=endpoint).observe(
                time.perf_counter() - started
            )
            HTTP_REQUESTS_TOTAL.labels(method=request.method, endpoint=endpoint, status_code=str(status_code)).inc()


# =============================================================================
# Helper Functions
# =============================================================================


def record_backend_call(operation: str, outcome: str, duration: float) -> None:
    """Record one hosted backend round trip."""
    # Duration is labelled by verb only ("select", "rpc", ...)
    BACKEND_CALLS_TOTAL.labels(operation=operation, outcome=outcome).inc()
    BACKEND_CALL_DURATION_SECONDS.labels(operation=operation.split(":", 1)[0]).observe(duration)


def record_view_event(outcome: str) -> None:
    """Record a view tracking outcome (tracked/gated/failed)."""
    VIEW_EVENTS_TOTAL.labels(outcome=outcome).inc()


def record_ip_lookup_fallback() -> None:
    IP_LOOKUP_FALLBACKS_TOTAL.inc()


def record_content_operation(resource: str, operation: str) -> None:
    """Record a content operation (create/update/delete/read)."""
    CONTENT_OPERATIONS_TOTAL.labels(resource=resource, operation=operation).inc()
