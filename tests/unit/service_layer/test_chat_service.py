"""
Unit Tests for ChatService

Tests reply extraction and the status mapping of upstream failures.
"""

import httpx
import pytest

from gemini_proxy.application.services import ChatService, extract_reply
from gemini_proxy.core.exceptions import (
    ProviderAPIError,
    ProviderTimeoutError,
    ProxyBaseError,
)
from gemini_proxy.llm_stream.providers import GeminiClient
from tests.test_fixtures.upstream_factory import RecordingUpstream, SlowUpstream, make_settings


def make_service(settings, handler) -> ChatService:
    transport = handler.transport if isinstance(handler, RecordingUpstream) else httpx.MockTransport(handler)
    return ChatService(GeminiClient.create(settings, transport=transport))


@pytest.mark.unit
class TestExtractReply:
    """Test the reply fallback chain."""

    def test_candidates_output(self):
        assert extract_reply({"candidates": [{"output": "Hello"}]}) == "Hello"

    def test_output_content(self):
        assert extract_reply({"output": [{"content": "Hi"}]}) == "Hi"

    def test_candidates_preferred_over_output(self):
        data = {"candidates": [{"output": "first"}], "output": [{"content": "second"}]}

        assert extract_reply(data) == "first"

    def test_empty_candidate_output_falls_through(self):
        data = {"candidates": [{"output": ""}], "output": [{"content": "Hi"}]}

        assert extract_reply(data) == "Hi"

    def test_unrecognized_payload_serialized(self):
        assert extract_reply({"foo": 1}) == '{"foo":1}'

    def test_empty_candidates_serialized(self):
        assert extract_reply({"candidates": []}) == '{"candidates":[]}'

    def test_non_json_body_is_null(self):
        assert extract_reply(None) == "null"

    def test_non_object_payload_serialized(self):
        assert extract_reply([1, 2]) == "[1,2]"


@pytest.mark.unit
class TestChatService:
    """Test the upstream call and error mapping."""

    @pytest.mark.asyncio
    async def test_returns_reply(self, settings):
        upstream = RecordingUpstream(
            lambda request: httpx.Response(200, json={"candidates": [{"output": "Hello"}]})
        )
        service = make_service(settings, upstream)

        assert await service.chat("hi") == "Hello"
        assert upstream.calls == 1

    @pytest.mark.asyncio
    async def test_non_json_reply(self, settings):
        upstream = RecordingUpstream(lambda request: httpx.Response(200, text="not json"))
        service = make_service(settings, upstream)

        assert await service.chat("hi") == "null"

    @pytest.mark.asyncio
    async def test_upstream_error_status(self, settings):
        upstream = RecordingUpstream(lambda request: httpx.Response(500, text="boom"))
        service = make_service(settings, upstream)

        with pytest.raises(ProviderAPIError) as exc_info:
            await service.chat("hi", thread_id="t-1")

        assert exc_info.value.message == "Upstream AI API error"
        assert exc_info.value.status_code == 502
        assert exc_info.value.details == {"status_code": 500}

    @pytest.mark.asyncio
    async def test_timeout(self):
        slow = SlowUpstream()
        service = make_service(make_settings(REQUEST_TIMEOUT=50), slow)

        with pytest.raises(ProviderTimeoutError) as exc_info:
            await service.chat("hi")

        assert exc_info.value.message == "AI request timed out"
        assert exc_info.value.status_code == 504
        assert slow.cancelled.is_set()

    @pytest.mark.asyncio
    async def test_transport_timeout(self, settings):
        def handler(request):
            raise httpx.ReadTimeout("read timed out")

        service = make_service(settings, RecordingUpstream(handler))

        with pytest.raises(ProviderTimeoutError):
            await service.chat("hi")

    @pytest.mark.asyncio
    async def test_unexpected_failure(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        service = make_service(settings, RecordingUpstream(handler))

        with pytest.raises(ProxyBaseError) as exc_info:
            await service.chat("hi")

        assert type(exc_info.value) is ProxyBaseError
        assert exc_info.value.message == "Internal server error"
        assert exc_info.value.status_code == 500
