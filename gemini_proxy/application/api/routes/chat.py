"""
Chat Routes

``POST /api/gemini_chat``: forward one prompt and return the whole reply as
``{"reply": "..."}``.

Errors are raised as ProxyBaseError subclasses and rendered by the
application exception handler as ``{"error": "..."}``.
"""

from fastapi import APIRouter

from gemini_proxy.application.api.dependencies import ChatServiceDep, SettingsDep
from gemini_proxy.application.api.models import ChatResponse, ErrorResponse, PromptRequest
from gemini_proxy.application.validators import PromptRequestValidator
from gemini_proxy.core.logging import get_thread_id

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post(
    "/gemini_chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "message missing or empty"},
        500: {"model": ErrorResponse, "description": "server not configured or internal error"},
        502: {"model": ErrorResponse, "description": "upstream answered with an error status"},
        504: {"model": ErrorResponse, "description": "upstream did not answer in time"},
    },
)
async def gemini_chat(
    settings: SettingsDep,
    chat_service: ChatServiceDep,
    body: PromptRequest | None = None,
) -> ChatResponse:
    message = PromptRequestValidator(settings).validate(body.message if body else None)
    reply = await chat_service.chat(message, thread_id=get_thread_id())
    return ChatResponse(reply=reply)
