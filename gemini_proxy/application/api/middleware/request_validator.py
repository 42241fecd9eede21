"""
Request Validation Middleware
=============================

Rejects oversized request bodies before they reach a route handler.

The limit comes from ``MAX_REQUEST_BODY_BYTES`` (default 256 KiB). A request
over the limit gets ``413 {"error": "request entity too large"}`` and a
malformed ``Content-Length`` header gets ``400``.

TWO CHECKS:
-----------
1. Declared size: a ``Content-Length`` over the limit is rejected without
   reading the body.
2. Received size: the body is read here, counting bytes as the ASGI
   ``http.request`` messages arrive, and rejected as soon as the count
   passes the limit. This covers chunked uploads that declare no length.

A body within the limit is replayed to the application unchanged; after
that, ``receive`` is handed through so disconnect detection keeps working
for streaming responses.

This is a pure ASGI middleware rather than a BaseHTTPMiddleware: the body
has to be counted before the application consumes it.

Body structure is validated later by the Pydantic request model, and
presence of ``message`` by PromptRequestValidator.
"""

from collections import deque

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from gemini_proxy.core.config.constants import (
    DEFAULT_MAX_REQUEST_BODY_BYTES,
    ERROR_PAYLOAD_TOO_LARGE,
)
from gemini_proxy.core.logging import get_logger

logger = get_logger(__name__)


class RequestValidationMiddleware:
    """Middleware enforcing the request body size ceiling."""

    def __init__(self, app: ASGIApp, max_request_size: int = DEFAULT_MAX_REQUEST_BODY_BYTES):
        self.app = app
        self.max_request_size = max_request_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)

        rejection = self._check_declared_size(request)
        if rejection is not None:
            await rejection(scope, receive, send)
            return

        buffered, received = await self._read_body(receive)
        if received > self.max_request_size:
            logger.warning(
                "Request rejected: body exceeds size limit",
                path=request.url.path,
                received_bytes=received,
                max_size=self.max_request_size,
            )
            await self._too_large()(scope, receive, send)
            return

        async def replay() -> Message:
            if buffered:
                return buffered.popleft()
            return await receive()

        await self.app(scope, replay, send)

    def _check_declared_size(self, request: Request) -> JSONResponse | None:
        content_length = request.headers.get("content-length")
        if not content_length:
            return None

        try:
            size = int(content_length)
        except ValueError:
            logger.warning(
                "Request rejected: invalid Content-Length header",
                path=request.url.path,
                content_length=content_length,
            )
            return JSONResponse(
                status_code=400,
                content={"error": "invalid Content-Length header"},
            )

        if size > self.max_request_size:
            logger.warning(
                "Request rejected: exceeds size limit",
                path=request.url.path,
                content_length=size,
                max_size=self.max_request_size,
            )
            return self._too_large()
        return None

    async def _read_body(self, receive: Receive) -> tuple[deque[Message], int]:
        """
        Read body messages until the body ends or the limit is passed.

        Returns:
            The messages read so far, and the number of body bytes they carry
        """
        buffered: deque[Message] = deque()
        received = 0

        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                # Client went away; the application sees the disconnect
                break

            received += len(message.get("body", b""))
            if received > self.max_request_size or not message.get("more_body", False):
                break

        return buffered, received

    @staticmethod
    def _too_large() -> JSONResponse:
        return JSONResponse(
            status_code=413,  # Payload Too Large
            content={"error": ERROR_PAYLOAD_TOO_LARGE},
        )


def add_request_validation_middleware(app, max_request_size: int = DEFAULT_MAX_REQUEST_BODY_BYTES):
    app.add_middleware(RequestValidationMiddleware, max_request_size=max_request_size)
    logger.info("Request validation middleware registered", max_request_size=max_request_size)
