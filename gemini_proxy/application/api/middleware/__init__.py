"""
Middleware Package
==================

Middleware sits between the client and route handlers. Starlette runs the
last-registered middleware first, so ``setup_middleware`` registers them
innermost first:

Request flow:  Client -> ErrorHandling -> RequestLogging -> RequestValidation -> Handler

1. error_handler: catch anything unhandled, render a generic 500
2. request_logging: log every request, including rejected ones
3. request_validator: reject oversized bodies before any work

USAGE:
------
    from gemini_proxy.application.api.middleware import setup_middleware

    app = FastAPI()
    setup_middleware(app, settings)
"""

from fastapi import FastAPI

from gemini_proxy.core.config.settings import Settings
from gemini_proxy.core.logging import get_logger

from .error_handler import ErrorHandlingMiddleware, add_error_handling_middleware
from .request_logging import RequestLoggingMiddleware, add_request_logging_middleware
from .request_validator import RequestValidationMiddleware, add_request_validation_middleware

logger = get_logger(__name__)


def setup_middleware(app: FastAPI, settings: Settings):
    """
    Register all middleware components in the correct order.

    Args:
        app: FastAPI application instance
        settings: Process settings (body size limit, environment)
    """
    add_request_validation_middleware(app, max_request_size=settings.MAX_REQUEST_BODY_BYTES)
    add_request_logging_middleware(app)
    add_error_handling_middleware(app, include_traceback=(settings.ENVIRONMENT == "development"))

    logger.info("All middleware components registered successfully")


__all__ = [
    "setup_middleware",
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "RequestValidationMiddleware",
    "add_error_handling_middleware",
    "add_request_logging_middleware",
    "add_request_validation_middleware",
]
