"""
Server-Sent Events framing.

Frames produced here are written to the client verbatim, each followed by a
blank line:

    data: {"chunk":"He"}
    data: {"error":"Upstream error"}
    data: [DONE]
    : heartbeat

JSON payloads are serialized compactly with orjson, so the wire bytes are
stable regardless of the caller's dict formatting.
"""

from typing import Any

import orjson
from pydantic import BaseModel

from gemini_proxy.core.config.constants import SSE_DONE_PAYLOAD, SSE_HEARTBEAT_COMMENT


class SSEEvent(BaseModel):
    """
    Represents one SSE event sent to the client.

    ``data`` is emitted as-is when it is a string and as compact JSON otherwise.
    """

    data: Any

    def format(self) -> str:
        """Format as SSE protocol string."""
        if isinstance(self.data, str):
            payload = self.data
        else:
            payload = orjson.dumps(self.data).decode("utf-8")
        return f"data: {payload}\n\n"

    @classmethod
    def chunk(cls, text: str) -> "SSEEvent":
        return cls(data={"chunk": text})

    @classmethod
    def error(cls, message: str) -> "SSEEvent":
        return cls(data={"error": message})

    @classmethod
    def done(cls) -> "SSEEvent":
        return cls(data=SSE_DONE_PAYLOAD)


def format_comment(text: str = SSE_HEARTBEAT_COMMENT) -> str:
    """A comment line; EventSource clients ignore it, proxies see traffic."""
    return f": {text}\n\n"
