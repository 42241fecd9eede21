from .gemini_client import GeminiClient, has_readable_body

__all__ = [
    "GeminiClient",
    "has_readable_body",
]
