"""
Proxy API Models

Pydantic models for the request and response bodies of the proxy
endpoints. Both POST endpoints accept the same body.

``message`` is untyped at the schema level: any falsy value (missing, null,
``""``, ``0``, ``false``, ``[]``) is answered with
``400 {"error": "message required"}`` by PromptRequestValidator rather than
FastAPI's generic 422. Any other non-string value gets
``400 {"error": "message must be a string"}``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PromptRequest(BaseModel):
    """Body of ``POST /api/gemini_stream`` and ``POST /api/gemini_chat``."""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"message": "Explain server-sent events in one sentence."}},
    )

    message: Any = Field(default=None, description="Prompt text forwarded upstream")


class ChatResponse(BaseModel):
    reply: str = Field(..., description="Generated text, or the raw upstream payload as JSON")


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    ok: bool = True
