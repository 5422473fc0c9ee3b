"""
Correlation ID middleware and utilities for request tracing.

The journal client stamps every reflection request with a correlation ID
and the backend echoes it back, so a CLI invocation and the server-side
log lines it caused can be matched up.

The correlation ID is:
- Read from X-Correlation-ID or X-Request-ID header if present
- Generated as a new short UUID if not present
- Stored in request.state.correlation_id for endpoint access
- Added to response headers for client debugging
- Made available via get_correlation_id() for logging
"""

import contextvars
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


_correlation_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id",
    default=None,
)

CORRELATION_HEADERS = [
    "X-Correlation-ID",
    "X-Request-ID",
]

RESPONSE_HEADER = "X-Correlation-ID"


def get_correlation_id() -> Optional[str]:
    """Correlation ID for the current context, or None outside a request."""
    return _correlation_id_ctx.get()


def generate_correlation_id() -> str:
    """New correlation ID: a UUID4 truncated to 8 characters."""
    return str(uuid.uuid4())[:8]


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle correlation IDs for request tracing.

    For each incoming request:
    1. Checks for existing correlation ID in headers
    2. Generates a new one if not present
    3. Stores it in request.state and context variable
    4. Adds it to response headers
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        correlation_id = None
        for header in CORRELATION_HEADERS:
            correlation_id = request.headers.get(header)
            if correlation_id:
                break

        if not correlation_id:
            correlation_id = generate_correlation_id()

        request.state.correlation_id = correlation_id
        token = _correlation_id_ctx.set(correlation_id)

        try:
            response = await call_next(request)
            response.headers[RESPONSE_HEADER] = correlation_id
            return response
        finally:
            _correlation_id_ctx.reset(token)


def propagate_correlation_headers(
    headers: Optional[dict] = None,
    correlation_id: Optional[str] = None,
) -> dict:
    """
    Build headers dict with correlation ID for outgoing requests.

    Args:
        headers: Existing headers dict to add to (optional, not modified)
        correlation_id: Specific correlation ID to use (optional).
                       If not provided, uses current context's ID.

    Returns:
        Headers dict with X-Correlation-ID added
    """
    headers = dict(headers or {})

    cid = correlation_id or get_correlation_id()
    if cid:
        headers[RESPONSE_HEADER] = cid

    return headers


class CorrelationContext:
    """
    Context manager for setting correlation ID outside a request.

    The CLI wraps each command in one so every log line and outgoing
    reflection request of that command shares an ID.

    Example:
        with CorrelationContext() as cid:
            logger.info("Submitting entry")
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _correlation_id_ctx.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _correlation_id_ctx.reset(self._token)
