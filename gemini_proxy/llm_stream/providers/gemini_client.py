#!/usr/bin/env python3
"""
Google Generative Language API Client

This module owns the one outbound call pattern shared by both inbound
endpoints: build the request descriptor, arm the timeout trigger on the
request's cancellation token, send the POST, and hand back a streaming
``httpx.Response`` whose lifetime is scoped by an async context manager.

Architectural Decision: raw httpx instead of the google-generativeai SDK
- The relay forwards upstream bytes as they arrive; the SDK parses and
  re-chunks responses, which would hide the upstream framing
- httpx task cancellation tears down the in-flight request cleanly, which is
  what the cancellation token relies on
- Tests swap the network for ``httpx.MockTransport``
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from gemini_proxy.core.config.constants import CancelReason, Stage
from gemini_proxy.core.config.settings import Settings
from gemini_proxy.core.exceptions import RequestCancelledError
from gemini_proxy.core.logging import get_logger, log_stage
from gemini_proxy.core.resilience import CancellationToken
from gemini_proxy.llm_stream.models import UpstreamRequest

logger = get_logger(__name__)

# Statuses that never carry a body
_BODYLESS_STATUSES = {204, 205}


def has_readable_body(response: httpx.Response) -> bool:
    """True unless the upstream response declares that it has no body."""
    if response.status_code in _BODYLESS_STATUSES:
        return False
    return response.headers.get("content-length") != "0"


async def _next_text(chunks: AsyncIterator[str]) -> str | None:
    try:
        return await chunks.__anext__()
    except StopAsyncIteration:
        return None


class GeminiClient:
    """
    Thin async client for ``models/{model}:generateText``.

    One instance (and one pooled ``httpx.AsyncClient``) is created per
    process in the application lifespan and shared by all requests. Nothing
    request-specific is stored on it.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._http = http_client

        logger.info(
            "Gemini client initialized",
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout_ms=settings.REQUEST_TIMEOUT,
        )

    @classmethod
    def create(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "GeminiClient":
        """
        Build a client with its own connection pool.

        Only the connect phase gets an httpx timeout. The wait for response
        headers is bounded by the cancellation token, and body reads are
        unbounded so long generations are not cut off.
        """
        http_client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(None, connect=settings.request_timeout_seconds),
        )
        return cls(settings, http_client)

    async def aclose(self) -> None:
        await self._http.aclose()

    def describe(self, prompt: str) -> UpstreamRequest:
        return UpstreamRequest.from_settings(self._settings, prompt)

    @asynccontextmanager
    async def open(self, prompt: str, token: CancellationToken) -> AsyncIterator[httpx.Response]:
        """
        Send the upstream request and yield the (unread) streaming response.

        The timeout trigger is armed only until response headers arrive;
        after that the token can still be fired by other sources such as a
        client disconnect.

        Raises:
            RequestCancelledError: The token fired before headers arrived
            httpx.HTTPError: Transport-level failure
        """
        upstream = self.describe(prompt)
        request = self._http.build_request(
            "POST", upstream.url, json=upstream.payload(), headers=upstream.headers
        )

        log_stage(
            logger,
            Stage.UPSTREAM_REQUEST,
            "upstream_request_started",
            model=upstream.model,
            prompt_length=len(prompt),
            thread_id=token.thread_id,
        )

        timer = token.cancel_after(self._settings.request_timeout_seconds, CancelReason.TIMEOUT)
        try:
            response = await token.guard(self._http.send(request, stream=True))
        finally:
            timer.cancel()

        log_stage(
            logger,
            Stage.UPSTREAM_REQUEST,
            "upstream_response_received",
            status_code=response.status_code,
            thread_id=token.thread_id,
        )

        try:
            yield response
        finally:
            await response.aclose()

    async def read_error_body(
        self, response: httpx.Response, token: CancellationToken
    ) -> str | None:
        """
        Best-effort read of an upstream error body for diagnostics.

        Returns:
            The decoded body, or None if it could not be read
        """
        try:
            await token.guard(response.aread())
        except (httpx.HTTPError, httpx.StreamError, RequestCancelledError) as e:
            logger.warning(
                "upstream_error_body_unreadable",
                error_type=type(e).__name__,
                error=str(e),
                thread_id=token.thread_id,
            )
            return None
        return response.text

    async def iter_text(
        self, response: httpx.Response, token: CancellationToken
    ) -> AsyncIterator[str]:
        """
        Yield decoded text chunks in upstream order, one network read at a time.

        Decoding is incremental, so a multi-byte character split across two
        reads is emitted whole. Each read is guarded by the token.

        Raises:
            RequestCancelledError: The token fired while waiting for a chunk
        """
        chunks = response.aiter_text()
        try:
            while True:
                text = await token.guard(_next_text(chunks))
                if text is None:
                    return
                yield text
        finally:
            await chunks.aclose()
