"""
Validation Exceptions

All exceptions related to request validation
"""

from gemini_proxy.core.exceptions.base import ProxyBaseError


class ValidationError(ProxyBaseError):
    """
    Raised when request validation fails.

    This is the base class for all validation-related errors.
    """

    status_code = 400


class InvalidInputError(ValidationError):
    """
    Raised when input validation fails.

    Common causes:
    - Missing request body
    - Missing or empty ``message`` field
    """
    pass
