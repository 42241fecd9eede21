"""
Streaming Routes
================

``POST /api/gemini_stream``: relay the upstream reply as Server-Sent Events.

SSE FORMAT:
-----------
Every frame is a ``data:`` line followed by a blank line:

    data: {"chunk":"He"}
    data: {"chunk":"llo"}
    data: [DONE]

Failures after the stream has started arrive as ``data: {"error":"..."}``.
Keep-alive comments (``: heartbeat``) are interleaved while waiting.

Validation failures are answered with a plain JSON error before any
stream data is sent.

ARCHITECTURE:
-------------
Route (HTTP only) -> StreamRelay (relay logic) -> GeminiClient (upstream)
"""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from gemini_proxy.application.api.dependencies import SettingsDep, StreamRelayDep
from gemini_proxy.application.api.models import ErrorResponse, PromptRequest
from gemini_proxy.application.validators import PromptRequestValidator
from gemini_proxy.core.config.constants import HEADER_THREAD_ID, SSE_MEDIA_TYPE, SSE_RESPONSE_HEADERS
from gemini_proxy.core.logging import get_thread_id

router = APIRouter(prefix="/api", tags=["Streaming"])


@router.post(
    "/gemini_stream",
    response_class=StreamingResponse,
    responses={
        200: {"content": {SSE_MEDIA_TYPE: {}}, "description": "SSE stream of reply chunks"},
        400: {"model": ErrorResponse, "description": "message missing or empty"},
        500: {"model": ErrorResponse, "description": "server not configured"},
    },
)
async def gemini_stream(
    settings: SettingsDep,
    relay: StreamRelayDep,
    body: PromptRequest | None = None,
):
    """
    Stream a generated reply for ``message``.

    The response headers go out as soon as validation passes; the upstream
    call starts when the server begins reading the body iterator.
    """
    message = PromptRequestValidator(settings).validate(body.message if body else None)

    thread_id = get_thread_id()
    session = relay.open_session(thread_id)

    headers = dict(SSE_RESPONSE_HEADERS)
    if thread_id:
        headers[HEADER_THREAD_ID] = thread_id

    return StreamingResponse(
        relay.stream(session, message),
        media_type=SSE_MEDIA_TYPE,
        headers=headers,
    )
