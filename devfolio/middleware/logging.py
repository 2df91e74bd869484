"""
Structured Logging

JSON log lines with a per-request ID, and an access log that records the
matched route template rather than the raw URL. Query strings (search
terms) and client addresses never reach the logs.
"""

import json
import logging
import logging.config
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record.

    Known context fields passed through `extra=` are copied to the top
    level; other extras are dropped so that arbitrary objects cannot leak
    into the log stream.
    """

    EXTRA_FIELDS = frozenset({"method", "route", "path", "status_code", "duration_ms", "blog_id", "error_code", "outcome"})

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        request_id = getattr(record, "request_id", "")
        if request_id:
            entry["request_id"] = request_id

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log plus request ID propagation.

    The incoming X-Request-ID is reused when present, otherwise one is
    generated; either way it is echoed on the response.
    """

    SKIPPED_PATHS = frozenset({"/health", "/metrics"})

    def __init__(self, app, logger_name: str = "devfolio.access"):
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            if request.url.path not in self.SKIPPED_PATHS:
                self._log(request, status_code, (time.perf_counter() - started) * 1000)
            request_id_var.reset(token)

    def _log(self, request: Request, status_code: int, duration_ms: float) -> None:
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        route = _route_template(request)
        self.logger.log(
            level,
            f"{request.method} {route} {status_code} {duration_ms:.1f}ms",
            extra={
                "method": request.method,
                "route": route,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )


def setup_structured_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure root logging for the service.

    Args:
        log_level: Level for devfolio loggers (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines when True, plain text for local development
    """
    formatter = (
        {"()": StructuredFormatter}
        if json_format
        else {"format": "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"}
    )
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_id": {"()": RequestIdFilter}},
            "formatters": {"default": formatter},
            "handlers": {
                "stream": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["request_id"],
                }
            },
            "root": {"level": "WARNING", "handlers": ["stream"]},
            "loggers": {
                "devfolio": {"level": log_level.upper()},
                "main": {"level": log_level.upper()},
                "uvicorn.error": {"level": "INFO"},
            },
        }
    )


def get_request_id() -> str:
    return request_id_var.get()
