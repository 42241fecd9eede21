"""
Unit Tests for Request Validators

Tests PromptRequestValidator and the body size middleware.
"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from gemini_proxy.application.api.middleware.request_logging import sanitize_headers
from gemini_proxy.application.api.middleware.request_validator import (
    add_request_validation_middleware,
)
from gemini_proxy.application.validators import PromptRequestValidator
from gemini_proxy.core.exceptions import ConfigurationError, InvalidInputError


def chunked(*parts: bytes):
    """Body sent with Transfer-Encoding: chunked and no Content-Length."""
    yield from parts


@pytest.mark.unit
class TestPromptRequestValidator:
    """Test suite for PromptRequestValidator."""

    def test_accepts_message(self, settings):
        assert PromptRequestValidator(settings).validate("What is AI?") == "What is AI?"

    def test_whitespace_message_forwarded_as_is(self, settings):
        assert PromptRequestValidator(settings).validate("   ") == "   "

    @pytest.mark.parametrize("message", [None, "", 0, False, [], {}])
    def test_rejects_missing_message(self, settings, message):
        with pytest.raises(InvalidInputError) as exc_info:
            PromptRequestValidator(settings).validate(message)

        assert exc_info.value.message == "message required"
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("message", [42, True, ["hi"], {"text": "hi"}])
    def test_rejects_non_string_message(self, settings, message):
        with pytest.raises(InvalidInputError) as exc_info:
            PromptRequestValidator(settings).validate(message)

        assert exc_info.value.message == "message must be a string"
        assert exc_info.value.status_code == 400

    def test_rejects_missing_credential(self, settings_without_key):
        with pytest.raises(ConfigurationError) as exc_info:
            PromptRequestValidator(settings_without_key).validate("hi")

        assert exc_info.value.message == "GEMINI_API_KEY not configured in server"
        assert exc_info.value.status_code == 500

    def test_message_checked_first(self, settings_without_key):
        with pytest.raises(InvalidInputError):
            PromptRequestValidator(settings_without_key).validate("")


@pytest.mark.unit
class TestRequestValidationMiddleware:
    """Test suite for the body size limit."""

    @pytest.fixture
    def client(self):
        app = FastAPI()

        @app.post("/echo")
        async def echo(request: Request):
            return {"received": len(await request.body())}

        add_request_validation_middleware(app, max_request_size=10)
        return TestClient(app)

    def test_body_within_limit(self, client):
        response = client.post("/echo", content=b"x" * 10)

        assert response.status_code == 200
        assert response.json() == {"received": 10}

    def test_body_over_limit(self, client):
        response = client.post("/echo", content=b"x" * 11)

        assert response.status_code == 413
        assert response.json() == {"error": "request entity too large"}

    def test_chunked_body_over_limit(self, client):
        response = client.post("/echo", content=chunked(b"x" * 6, b"x" * 6))

        assert response.status_code == 413
        assert response.json() == {"error": "request entity too large"}

    def test_chunked_body_within_limit_reaches_handler(self, client):
        response = client.post("/echo", content=chunked(b"x" * 4, b"x" * 4))

        assert response.status_code == 200
        assert response.json() == {"received": 8}


@pytest.mark.unit
class TestHeaderSanitizing:
    def test_sensitive_headers_redacted(self):
        headers = sanitize_headers({"Authorization": "Bearer secret", "Accept": "*/*"})

        assert headers == {"Authorization": "[REDACTED]", "Accept": "*/*"}
