"""
Upstream Provider Exceptions

All exceptions related to calling the generative-text backend.
"""

from gemini_proxy.core.exceptions.base import ProxyBaseError


class ProviderError(ProxyBaseError):
    """Base exception for upstream provider errors."""

    status_code = 502


class ProviderAPIError(ProviderError):
    """
    Raised when the upstream API answers with a non-success status.

    Common causes:
    - Invalid or revoked API key
    - Unsupported model
    - Upstream rate limiting
    - Malformed request body
    """

    status_code = 502


class ProviderTimeoutError(ProviderError):
    """
    Raised when the upstream API does not respond within REQUEST_TIMEOUT.
    """

    status_code = 504
