"""
Base Exception Class

This module contains the base exception class that all other exceptions
inherit from, plus ConfigurationError.
"""

from typing import Any


class ProxyBaseError(Exception):
    """
    Base exception for all proxy errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling
    - Thread ID correlation
    - Structured error logging
    - A single mapping from exception type to HTTP status

    Attributes:
        message: Error message (also the client-facing ``error`` string)
        thread_id: Thread ID for correlation (if available)
        details: Additional error details (dict)
        status_code: HTTP status used when the error is rendered as JSON

    Example:
        raise ProviderAPIError(
            "Upstream AI API error",
            thread_id="abc-123",
            details={"status_code": 429},
        )
    """

    status_code: int = 500

    def __init__(
        self, message: str, thread_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.thread_id = thread_id
        self.details = (details or {}).copy()  # Create a copy to prevent external modification
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dict with error_type, message, thread_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "thread_id": self.thread_id,
            "details": self.details,
        }

    def with_context(self, **context) -> "ProxyBaseError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        thread_id_str = f", thread_id='{self.thread_id}'" if self.thread_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{thread_id_str}{details_str})"


class ConfigurationError(ProxyBaseError):
    """Raised when server configuration is invalid or missing (e.g. no API key)."""

    status_code = 500
