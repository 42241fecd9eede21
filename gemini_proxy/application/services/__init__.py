"""
Application Services Package

Business logic used by the API routes. Routes handle HTTP; services talk to
the upstream client and shape results.

- StreamRelay: ``/api/gemini_stream`` SSE relay
- ChatService: ``/api/gemini_chat`` JSON proxy
"""

from gemini_proxy.application.services.chat_service import ChatService, extract_reply
from gemini_proxy.application.services.streaming_service import StreamRelay

__all__ = [
    "ChatService",
    "StreamRelay",
    "extract_reply",
]
