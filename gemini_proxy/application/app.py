#!/usr/bin/env python3
"""
FastAPI Application Entry Point

This is the main entry point for the Gemini proxy. It configures the
FastAPI application, middleware, exception handlers and routes.

Endpoints:
    POST /api/gemini_stream   SSE relay of the upstream reply
    POST /api/gemini_chat     JSON proxy returning {"reply": ...}
    GET  /health              liveness probe

Run:
    python -m gemini_proxy.application.app
    uvicorn gemini_proxy.application.app:app --port 3000
"""

import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gemini_proxy.application.api.middleware import setup_middleware
from gemini_proxy.application.api.routes import chat_router, health_router, streaming_router
from gemini_proxy.application.services import ChatService, StreamRelay
from gemini_proxy.core.config.constants import HEADER_THREAD_ID
from gemini_proxy.core.config.settings import Settings, get_settings
from gemini_proxy.core.exceptions import ProxyBaseError
from gemini_proxy.core.logging import clear_thread_id, get_logger, set_thread_id, setup_logging
from gemini_proxy.llm_stream.providers import GeminiClient

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    Builds the shared upstream client and the services on top of it and
    stores them on ``app.state`` for dependencies.py.
    """
    settings: Settings = app.state.settings

    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

    logger.info(
        "Starting Gemini proxy",
        environment=settings.ENVIRONMENT,
        version=settings.APP_VERSION,
        model=settings.GEMINI_MODEL,
        api_key_configured=settings.api_key_configured,
    )
    if not settings.api_key_configured:
        logger.warning("GEMINI_API_KEY is not set; proxy endpoints will answer 500")

    client = GeminiClient.create(settings, transport=app.state.upstream_transport)
    stream_relay = StreamRelay(client, settings)

    app.state.stream_relay = stream_relay
    app.state.chat_service = ChatService(client)

    logger.info("Application startup complete")

    try:
        yield
    finally:
        logger.info("Shutting down application")

        await stream_relay.shutdown()
        await client.aclose()

        logger.info("Application shutdown complete")


# ============================================================================
# Middleware & Exception Handlers
# ============================================================================


async def thread_id_middleware(request: Request, call_next):
    """
    Inject thread ID into all requests for correlation.
    """
    thread_id = request.headers.get(HEADER_THREAD_ID) or str(uuid.uuid4())

    set_thread_id(thread_id)

    try:
        response = await call_next(request)
        response.headers[HEADER_THREAD_ID] = thread_id
        return response

    finally:
        clear_thread_id()


async def proxy_exception_handler(request: Request, exc: ProxyBaseError):
    """Render a typed proxy error as ``{"error": message}`` with its status."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"Request error: {exc.message}",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        path=request.url.path,
        details=exc.details or None,
        thread_id=exc.thread_id,
    )

    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit configuration; defaults to the process settings
        transport: httpx transport for upstream calls (tests pass a MockTransport)

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Server-side relay for the Google Generative Language API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.upstream_transport = transport

    # Middleware runs in reverse order of registration: the thread ID is set
    # first, so every later log line and response carries it.
    setup_middleware(app, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[HEADER_THREAD_ID],
    )

    app.middleware("http")(thread_id_middleware)

    app.add_exception_handler(ProxyBaseError, proxy_exception_handler)

    app.include_router(health_router)
    app.include_router(streaming_router)
    app.include_router(chat_router)

    return app


# Create application instance
app = create_app()


# ============================================================================
# Main Entry Point
# ============================================================================


def main():
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "gemini_proxy.application.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
