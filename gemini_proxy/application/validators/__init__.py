"""
Application Validators Module

Presence checks shared by the streaming and chat endpoints.

Usage:
    from gemini_proxy.application.validators import PromptRequestValidator

    message = PromptRequestValidator(settings).validate(body.message)
"""

from gemini_proxy.application.validators.prompt_validator import PromptRequestValidator

__all__ = ["PromptRequestValidator"]
