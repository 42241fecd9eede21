"""
Upstream Request Descriptor

Everything needed to issue one ``generateText`` call. Built fresh for every
inbound request from the injected Settings and the request body, never
cached or shared between requests.
"""

from dataclasses import dataclass, field
from typing import Any

from gemini_proxy.core.config.settings import Settings


@dataclass(frozen=True)
class UpstreamRequest:
    """
    Describes a single outbound call to the generative-text backend.

    Attributes:
        url: Full endpoint URL (``.../models/{model}:generateText``)
        model: Model identifier, kept for logging
        prompt: Prompt text from the client
        max_output_tokens: Output-size ceiling sent upstream
        api_key: Bearer credential (excluded from repr)
    """

    url: str
    model: str
    prompt: str
    max_output_tokens: int
    api_key: str = field(repr=False)

    @classmethod
    def from_settings(cls, settings: Settings, prompt: str) -> "UpstreamRequest":
        return cls(
            url=settings.upstream_url,
            model=settings.GEMINI_MODEL,
            prompt=prompt,
            max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
            api_key=settings.GEMINI_API_KEY or "",
        )

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def payload(self) -> dict[str, Any]:
        """JSON body: ``{"prompt": {"text": ...}, "maxOutputTokens": N}``."""
        return {
            "prompt": {"text": self.prompt},
            "maxOutputTokens": self.max_output_tokens,
        }
