#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
Gemini proxy. Settings are built once at process start and handed to the
FastAPI application, which stores them on ``app.state`` for injection into
request handlers.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing: construct ``Settings(...)`` with explicit values
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gemini_proxy.core.config.constants import (
    DEFAULT_GEMINI_BASE_URL,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_MAX_REQUEST_BODY_BYTES,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT_MS,
    SSE_HEARTBEAT_INTERVAL,
)


class Settings(BaseSettings):
    """
    Process configuration for the proxy.

    Usage:
        from gemini_proxy.core.config.settings import get_settings

        settings = get_settings()
        timeout = settings.request_timeout_seconds
        url = settings.upstream_url
    """

    # Upstream (Google Generative Language API)
    GEMINI_API_KEY: str | None = Field(default=None, description="Bearer credential for the upstream API")
    GEMINI_MODEL: str = Field(default=DEFAULT_GEMINI_MODEL, description="Model identifier")
    GEMINI_BASE_URL: str = Field(default=DEFAULT_GEMINI_BASE_URL, description="Upstream API root")
    GEMINI_MAX_OUTPUT_TOKENS: int = Field(
        default=DEFAULT_MAX_OUTPUT_TOKENS, gt=0, description="Output token ceiling per request"
    )
    REQUEST_TIMEOUT: int = Field(
        default=DEFAULT_REQUEST_TIMEOUT_MS,
        gt=0,
        description="Maximum wait for upstream response headers (milliseconds)",
    )

    # Streaming
    SSE_HEARTBEAT_INTERVAL: float = Field(
        default=SSE_HEARTBEAT_INTERVAL, gt=0, description="Keep-alive comment period (seconds)"
    )

    # Server
    HOST: str = Field(default="0.0.0.0", description="Listen host")
    PORT: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Listen port")
    MAX_REQUEST_BODY_BYTES: int = Field(
        default=DEFAULT_MAX_REQUEST_BODY_BYTES, gt=0, description="Request body size ceiling"
    )
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Gemini Proxy", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("GEMINI_API_KEY")
    @classmethod
    def blank_key_is_missing(cls, v):
        """An empty or whitespace-only key counts as not configured."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @property
    def request_timeout_seconds(self) -> float:
        return self.REQUEST_TIMEOUT / 1000

    @property
    def upstream_url(self) -> str:
        """Full ``generateText`` URL for the configured model."""
        return f"{self.GEMINI_BASE_URL.rstrip('/')}/models/{self.GEMINI_MODEL}:generateText"

    @property
    def api_key_configured(self) -> bool:
        return self.GEMINI_API_KEY is not None


# Process-wide instance, built lazily by the entry point
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the process settings instance.

    Only the application factory and the ``__main__`` entry point call this.
    Request handlers receive the instance through dependency injection.

    Returns:
        Settings: Process settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Rebuild settings from the current environment (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
