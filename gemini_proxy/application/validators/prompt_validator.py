"""
Prompt Request Validators

Both proxy endpoints accept the same body and reject the same way before any
upstream work starts:

1. ``message`` missing or falsy  -> InvalidInputError (400)
2. ``message`` not a string      -> InvalidInputError (400)
3. no credential configured      -> ConfigurationError (500)

The message check runs first, so a request without a message never reveals
whether the server is configured.

Only presence and type are checked. Content is forwarded untouched; there is no length
cap beyond the request body size limit and no sanitization.
"""

from typing import Any

from gemini_proxy.core.config.constants import (
    ERROR_API_KEY_MISSING,
    ERROR_MESSAGE_NOT_TEXT,
    ERROR_MESSAGE_REQUIRED,
    Stage,
)
from gemini_proxy.core.config.settings import Settings
from gemini_proxy.core.exceptions import ConfigurationError, InvalidInputError
from gemini_proxy.core.logging import get_logger, log_stage

logger = get_logger(__name__)


class PromptRequestValidator:
    """
    Validates an inbound prompt request against the running configuration.

    Usage:
        validator = PromptRequestValidator(settings)
        message = validator.validate(body.message if body else None)
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def validate_message(self, message: Any) -> str:
        # Whitespace-only prompts are forwarded as-is
        if not message:
            log_stage(logger, Stage.REQUEST_VALIDATION, "request_rejected", level="warning", reason="missing_message")
            raise InvalidInputError(ERROR_MESSAGE_REQUIRED)
        if not isinstance(message, str):
            log_stage(logger, Stage.REQUEST_VALIDATION, "request_rejected", level="warning", reason="message_not_text")
            raise InvalidInputError(ERROR_MESSAGE_NOT_TEXT)
        return message

    def validate_credential(self) -> None:
        if not self.settings.api_key_configured:
            log_stage(logger, Stage.REQUEST_VALIDATION, "request_rejected", level="error", reason="missing_api_key")
            raise ConfigurationError(ERROR_API_KEY_MISSING)

    def validate(self, message: Any) -> str:
        """
        Run all checks in order.

        Returns:
            The prompt text to forward upstream

        Raises:
            InvalidInputError: message missing, falsy or not a string
            ConfigurationError: GEMINI_API_KEY not configured
        """
        message = self.validate_message(message)
        self.validate_credential()
        log_stage(logger, Stage.REQUEST_VALIDATION, "request_validated", level="debug", prompt_length=len(message))
        return message
