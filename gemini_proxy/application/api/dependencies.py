"""
FastAPI Dependency Injection Module
===================================

Reusable dependencies for the application singletons created in the
lifespan and stored on ``app.state``:

- ``app.state.settings``: Settings
- ``app.state.stream_relay``: StreamRelay
- ``app.state.chat_service``: ChatService

Handlers never build these themselves and never call ``get_settings()``.
Tests get a fully wired app from ``create_app(settings, transport=...)``.

Example:
    @router.post("/gemini_chat")
    async def gemini_chat(body: PromptRequest, chat_service: ChatServiceDep):
        ...
"""

from typing import Annotated

from fastapi import Depends, Request

from gemini_proxy.application.services import ChatService, StreamRelay
from gemini_proxy.core.config.settings import Settings


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(
            f"{name} not initialized in app.state. "
            "This indicates the application lifespan startup didn't complete properly."
        )
    return value


def get_app_settings(request: Request) -> Settings:
    return _from_state(request, "settings")


def get_stream_relay(request: Request) -> StreamRelay:
    return _from_state(request, "stream_relay")


def get_chat_service(request: Request) -> ChatService:
    return _from_state(request, "chat_service")


# ============================================================================
# TYPE ALIASES FOR DEPENDENCY INJECTION
# ============================================================================

SettingsDep = Annotated[Settings, Depends(get_app_settings)]
StreamRelayDep = Annotated[StreamRelay, Depends(get_stream_relay)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
