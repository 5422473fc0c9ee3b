"""
Standardized error response helpers for the journal service.

Every non-2xx response from the backend uses the same envelope, with the
request's correlation ID so a client-side failure can be traced to the
server log line.

Usage:
    from app.shared.errors import ErrorCode, error_response, external_service_error

    return external_service_error(
        service_name="anthropic",
        message="Error calling Anthropic",
        correlation_id=request.state.correlation_id,
    )
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel
from fastapi import Request
from fastapi.responses import JSONResponse


class ErrorCode(str, Enum):
    """Error codes returned by the journal service."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class ErrorDetail(BaseModel):
    """Structured error detail model."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    correlation_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""
    error: ErrorDetail


def get_correlation_id(request: Optional[Request] = None) -> Optional[str]:
    """Extract correlation ID from request state."""
    if request is None:
        return None
    return getattr(request.state, "correlation_id", None)


def error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    Create a standardized JSON error response.

    Args:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details
        correlation_id: Request correlation ID for tracing

    Returns:
        JSONResponse with standardized error format
    """
    error_detail = ErrorDetail(
        code=code.value,
        message=message,
        details=details,
        correlation_id=correlation_id,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": error_detail.model_dump(exclude_none=True)},
    )


def validation_error(
    message: str,
    details: Optional[dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """400 validation error, e.g. a request body without a prompt."""
    return error_response(
        code=ErrorCode.VALIDATION_ERROR,
        message=message,
        status_code=400,
        details=details,
        correlation_id=correlation_id,
    )


def not_found_error(
    message: str = "Not found",
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """404 for unknown routes."""
    return error_response(
        code=ErrorCode.NOT_FOUND,
        message=message,
        status_code=404,
        correlation_id=correlation_id,
    )


def internal_error(
    message: str = "Internal server error",
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    500 internal error.

    Note: Be careful not to expose sensitive internal details to clients.
    """
    return error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message=message,
        status_code=500,
        correlation_id=correlation_id,
    )


def external_service_error(
    service_name: str,
    message: str,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    502 bad gateway for completion provider failures.

    Args:
        service_name: Name of the failing external service
        message: Description of the failure
        correlation_id: Request correlation ID
    """
    return error_response(
        code=ErrorCode.EXTERNAL_SERVICE_ERROR,
        message=message,
        status_code=502,
        details={"service": service_name},
        correlation_id=correlation_id,
    )
