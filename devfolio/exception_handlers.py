"""
Exception handlers

Every error leaves the API in one shape:

    {
        "error": {
            "status_code": 404,
            "error_code": "RESOURCE_NOT_FOUND",
            "message": "Blog with id 'abc' not found",
            "type": "Not Found",
            "details": {"resource_type": "Blog", "resource_id": "abc"},
            "path": "/api/blogs/abc",
            "request_id": "5f0c..."
        }
    }

Backend failures keep their backend message out of the body; it is logged
instead.
"""

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from devfolio.exceptions import BackendError, ErrorCode, FolioError
from devfolio.middleware.logging import get_request_id

logger = logging.getLogger(__name__)

STATUS_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_FAILED,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.AUTH_FAILED,
    status.HTTP_404_NOT_FOUND: ErrorCode.RESOURCE_NOT_FOUND,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION_FAILED,
    status.HTTP_502_BAD_GATEWAY: ErrorCode.BACKEND_ERROR,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.BACKEND_UNAVAILABLE,
}


def error_response(
    request: Request,
    status_code: int,
    message: str,
    error_code: ErrorCode,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    try:
        error_type = HTTPStatus(status_code).phrase
    except ValueError:
        error_type = "Error"

    body: dict[str, Any] = {
        "status_code": status_code,
        "error_code": error_code.value,
        "message": message,
        "type": error_type,
        "path": request.url.path,
    }
    if details:
        body["details"] = details
    request_id = get_request_id()
    if request_id:
        body["request_id"] = request_id
    return JSONResponse(status_code=status_code, content={"error": body})


async def folio_error_handler(request: Request, exc: FolioError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"{type(exc).__name__}: {exc.message}",
        extra={"status_code": exc.status_code, "error_code": exc.error_code.value, "path": request.url.path},
    )

    message = exc.message
    if isinstance(exc, BackendError):
        message = "The content backend could not complete the request"
    return error_response(request, exc.status_code, message, exc.error_code, exc.details)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_code = STATUS_ERROR_CODES.get(exc.status_code, ErrorCode.UNKNOWN_ERROR)
    return error_response(request, exc.status_code, str(exc.detail), error_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with one entry per invalid field (`body.` prefix removed)."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Request validation failed: {len(errors)} error(s)", extra={"path": request.url.path})
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        ErrorCode.VALIDATION_FAILED,
        {"validation_errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled {type(exc).__name__}", exc_info=exc, extra={"path": request.url.path})
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        ErrorCode.INTERNAL_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FolioError, folio_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
