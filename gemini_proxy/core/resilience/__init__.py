"""
Resilience Module

Cancellation primitives shared by the streaming relay and the JSON proxy.
No retry or circuit breaking lives here: upstream failures
are surfaced to the caller exactly once.
"""

from gemini_proxy.core.config.constants import CancelReason

from .cancellation import CancellationToken

__all__ = [
    "CancelReason",
    "CancellationToken",
]
