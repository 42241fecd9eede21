"""
Exception Module

Structured exception hierarchy for the Gemini proxy.

Module Structure:
-----------------
- **base.py**: ProxyBaseError base class + ConfigurationError
- **provider.py**: Upstream API exceptions
- **streaming.py**: Event channel and cancellation exceptions
- **validation.py**: Request validation exceptions

Every class carries a ``status_code`` used by the application exception
handler when the error is returned as a JSON response.

Usage:
------
```python
from gemini_proxy.core.exceptions import InvalidInputError, ProviderTimeoutError
```
"""

from gemini_proxy.core.exceptions.base import ConfigurationError, ProxyBaseError
from gemini_proxy.core.exceptions.provider import (
    ProviderAPIError,
    ProviderError,
    ProviderTimeoutError,
)
from gemini_proxy.core.exceptions.streaming import (
    ChannelClosedError,
    RequestCancelledError,
    StreamingError,
)
from gemini_proxy.core.exceptions.validation import InvalidInputError, ValidationError

__all__ = [
    # Base
    "ProxyBaseError",
    "ConfigurationError",
    # Provider
    "ProviderError",
    "ProviderAPIError",
    "ProviderTimeoutError",
    # Streaming
    "StreamingError",
    "ChannelClosedError",
    "RequestCancelledError",
    # Validation
    "ValidationError",
    "InvalidInputError",
]
