"""
Custom Exception Classes for devfolio

This module defines custom exceptions for consistent error handling and
error responses across the service.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in error responses"""

    AUTH_FAILED = "AUTH_FAILED"
    AUTH_TOKEN_MISSING = "AUTH_TOKEN_MISSING"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    BACKEND_ERROR = "BACKEND_ERROR"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    IP_LOOKUP_FAILED = "IP_LOOKUP_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class FolioError(Exception):
    """Base exception class for all devfolio exceptions"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Authentication Exceptions
# ============================================================================


class AuthenticationError(FolioError):
    """Raised when the hosted backend rejects the caller's session"""

    error_code = ErrorCode.AUTH_FAILED

    def __init__(self, message: str = "Authentication failed", details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED, details=details or {})


class MissingTokenError(AuthenticationError):
    """Raised when no bearer token accompanies an admin request"""

    error_code = ErrorCode.AUTH_TOKEN_MISSING

    def __init__(self, message: str = "Missing bearer token"):
        super().__init__(message=message)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(FolioError):
    """Base class for resource not found errors"""

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class BlogNotFoundError(ResourceNotFoundError):
    """Raised when a blog post is not found"""

    def __init__(self, blog_id: Any | None = None):
        super().__init__(resource_type="Blog", resource_id=blog_id)


class ProjectNotFoundError(ResourceNotFoundError):
    """Raised when a project is not found"""

    def __init__(self, project_id: Any | None = None):
        super().__init__(resource_type="Project", resource_id=project_id)


class MessageNotFoundError(ResourceNotFoundError):
    """Raised when a contact message is not found"""

    def __init__(self, message_id: Any | None = None):
        super().__init__(resource_type="Message", resource_id=message_id)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(FolioError):
    """Raised when input validation fails"""

    error_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


# ============================================================================
# External Service Exceptions
# ============================================================================


class BackendError(FolioError):
    """Raised when a hosted backend call fails or is rejected"""

    error_code = ErrorCode.BACKEND_ERROR

    def __init__(
        self,
        message: str = "Hosted backend request failed",
        operation: str | None = None,
        backend_status: int | None = None,
    ):
        details: dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if backend_status is not None:
            details["backend_status"] = backend_status
        self.operation = operation
        self.backend_status = backend_status
        super().__init__(message=message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)


class BackendUnavailableError(BackendError):
    """Raised when the hosted backend cannot be reached at all"""

    error_code = ErrorCode.BACKEND_UNAVAILABLE

    def __init__(self, message: str = "Hosted backend is unreachable", operation: str | None = None):
        super().__init__(message=message, operation=operation)
        self.status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class IPLookupError(FolioError):
    """Raised when the public IP lookup service gives no usable answer"""

    error_code = ErrorCode.IP_LOOKUP_FAILED

    def __init__(self, message: str = "IP lookup failed"):
        super().__init__(message=message, status_code=status.HTTP_502_BAD_GATEWAY)
