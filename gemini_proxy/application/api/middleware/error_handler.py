"""
Error Handling Middleware
=========================

Last line of defense for exceptions nothing else handled.

FastAPI exception handlers render the typed ProxyBaseError hierarchy (see
``application/app.py``). Anything that still escapes a route handler or
another middleware ends up here: it is logged with its traceback and the
client gets the generic body ``{"error": "Internal server error"}``.

Failures inside an SSE stream never reach this middleware. By the time the
relay runs, the response has started and errors travel in-band as SSE error
events.
"""

import traceback
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from gemini_proxy.core.config.constants import ERROR_INTERNAL
from gemini_proxy.core.logging import get_logger

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for centralized handling of unexpected exceptions.

    Internal details are never sent to clients outside development:
    the response only carries the generic error string.
    """

    def __init__(self, app, include_traceback: bool = False):
        """
        Args:
            app: The ASGI application
            include_traceback: Whether to include stack traces in error responses
                              (development only)
        """
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            method = request.method
            path = request.url.path
            error_type = type(e).__name__

            logger.error(
                f"Unhandled exception in request: {method} {path}",
                method=method,
                path=path,
                error_type=error_type,
                error_message=str(e),
                exc_info=True,
            )

            error_response = {"error": ERROR_INTERNAL}

            if self.include_traceback:
                error_response["error_type"] = error_type
                error_response["detail"] = str(e)
                error_response["traceback"] = traceback.format_exc()

            return JSONResponse(status_code=500, content=error_response)


def add_error_handling_middleware(app, include_traceback: bool = False):
    """
    Add error handling middleware to the FastAPI application.

    Should be registered so that it runs outermost of the custom
    middleware, catching errors from the others and from route handlers.

    Args:
        app: FastAPI application instance
        include_traceback: Whether to include stack traces in responses
    """
    app.add_middleware(ErrorHandlingMiddleware, include_traceback=include_traceback)
    logger.info("Error handling middleware registered", include_traceback=include_traceback)
