"""
Streaming Exceptions

All exceptions related to SSE relaying and upstream cancellation
"""

from gemini_proxy.core.config.constants import CancelReason
from gemini_proxy.core.exceptions.base import ProxyBaseError


class StreamingError(ProxyBaseError):
    """Base exception for streaming errors."""
    pass


class ChannelClosedError(StreamingError):
    """
    Raised when writing to an event channel that can no longer deliver.

    Common causes:
    - Client disconnected
    - The relay already closed the channel after its terminal event
    """
    pass


class RequestCancelledError(StreamingError):
    """
    Raised when a cancellation token aborts an in-flight upstream operation.

    The ``reason`` attribute tells the caller which trigger fired first.
    """

    def __init__(self, reason: CancelReason, thread_id: str | None = None):
        super().__init__(
            f"Upstream request cancelled: {reason.value}",
            thread_id=thread_id,
            details={"reason": reason.value},
        )
        self.reason = reason
