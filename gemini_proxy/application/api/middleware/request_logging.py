"""
Request Logging Middleware
==========================

Logs every HTTP request on arrival and on completion (method, path, status,
duration) with sensitive headers redacted.

For ``/api/gemini_stream`` the "completed" entry is written when response
headers go out, not when the stream ends; the relay logs its own lifecycle
under the ``3.0_STREAM_RELAY`` stage.

Bodies are never logged: prompts are user content and may be large.
"""

import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from gemini_proxy.core.logging import get_logger

logger = get_logger(__name__)


SENSITIVE_HEADERS = {
    "authorization",  # Bearer tokens, Basic auth
    "cookie",  # Session cookies
    "x-api-key",  # API keys
    "x-goog-api-key",  # Google API keys
    "x-auth-token",  # Authentication tokens
}


def sanitize_headers(headers: dict) -> dict:
    """Replace sensitive header values with "[REDACTED]"."""
    return {
        key: "[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        method = request.method
        path = request.url.path

        logger.info(
            f"Incoming request: {method} {path}",
            method=method,
            path=path,
            query_params=str(request.query_params) if request.query_params else None,
            headers=sanitize_headers(dict(request.headers)),
            client_host=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path}",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=round(time.perf_counter() - start_time, 4),
            )
            raise

        logger.info(
            f"Request completed: {method} {path}",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_seconds=round(time.perf_counter() - start_time, 4),
        )
        return response


def add_request_logging_middleware(app):
    app.add_middleware(RequestLoggingMiddleware)
    logger.info("Request logging middleware registered")
