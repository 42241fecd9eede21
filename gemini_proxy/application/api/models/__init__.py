from .chat import ChatResponse, ErrorResponse, HealthResponse, PromptRequest

__all__ = [
    "ChatResponse",
    "ErrorResponse",
    "HealthResponse",
    "PromptRequest",
]
