"""
Unit Tests for Core Exceptions

Tests the exception hierarchy and the HTTP status each class maps to.
"""

import pytest

from gemini_proxy.core.config.constants import CancelReason
from gemini_proxy.core.exceptions import (
    ChannelClosedError,
    ConfigurationError,
    InvalidInputError,
    ProviderAPIError,
    ProviderError,
    ProviderTimeoutError,
    ProxyBaseError,
    RequestCancelledError,
    StreamingError,
    ValidationError,
)


@pytest.mark.unit
class TestProxyBaseError:
    """Test the base exception class."""

    def test_base_error_creation(self):
        error = ProxyBaseError("Test message")
        assert str(error) == "Test message"
        assert error.message == "Test message"

    def test_base_error_default_values(self):
        error = ProxyBaseError("Test")
        assert error.details == {}
        assert error.thread_id is None
        assert error.status_code == 500

    def test_details_are_copied(self):
        details = {"key": "value"}
        error = ProxyBaseError("Test", details=details)
        details["key"] = "changed"

        assert error.details == {"key": "value"}

    def test_to_dict(self):
        error = ProxyBaseError("Test", thread_id="t-1", details={"a": 1})

        assert error.to_dict() == {
            "error_type": "ProxyBaseError",
            "message": "Test",
            "thread_id": "t-1",
            "details": {"a": 1},
        }

    def test_with_context_chains(self):
        error = ProxyBaseError("Test").with_context(status_code=429)

        assert isinstance(error, ProxyBaseError)
        assert error.details == {"status_code": 429}

    def test_repr_includes_thread_id(self):
        error = ProxyBaseError("Test", thread_id="t-1")

        assert repr(error) == "ProxyBaseError(message='Test', thread_id='t-1')"


@pytest.mark.unit
class TestStatusCodes:
    """Each class carries the HTTP status it is rendered with."""

    @pytest.mark.parametrize(
        "exc_class,status",
        [
            (ConfigurationError, 500),
            (ValidationError, 400),
            (InvalidInputError, 400),
            (ProviderError, 502),
            (ProviderAPIError, 502),
            (ProviderTimeoutError, 504),
            (StreamingError, 500),
            (ChannelClosedError, 500),
        ],
    )
    def test_status_code(self, exc_class, status):
        assert exc_class("x").status_code == status

    def test_hierarchy(self):
        assert issubclass(InvalidInputError, ValidationError)
        assert issubclass(ProviderTimeoutError, ProviderError)
        assert issubclass(ChannelClosedError, StreamingError)
        assert issubclass(RequestCancelledError, StreamingError)
        for exc_class in (ConfigurationError, ValidationError, ProviderError, StreamingError):
            assert issubclass(exc_class, ProxyBaseError)


@pytest.mark.unit
class TestRequestCancelledError:
    def test_carries_reason(self):
        error = RequestCancelledError(CancelReason.TIMEOUT, thread_id="t-1")

        assert error.reason is CancelReason.TIMEOUT
        assert error.message == "Upstream request cancelled: timeout"
        assert error.details == {"reason": "timeout"}
        assert error.thread_id == "t-1"
