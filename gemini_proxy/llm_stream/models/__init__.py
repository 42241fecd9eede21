from .sse import SSEEvent, format_comment
from .upstream_request import UpstreamRequest

__all__ = [
    "SSEEvent",
    "UpstreamRequest",
    "format_comment",
]
