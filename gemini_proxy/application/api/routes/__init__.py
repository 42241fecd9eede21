from .chat import router as chat_router
from .health import router as health_router
from .streaming import router as streaming_router

__all__ = [
    "chat_router",
    "health_router",
    "streaming_router",
]
