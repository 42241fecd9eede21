"""
Streaming Relay Service
=======================

StreamRelay turns one ``/api/gemini_stream`` request into an SSE response
body. It owns no per-request state; everything request-specific lives in the
RelaySession it is handed.

TWO HALVES PER REQUEST:
-----------------------
1. ``stream()`` is the response body iterator given to StreamingResponse.
   It starts the relay task and drains the session channel into the HTTP
   response.
2. ``relay()`` runs as a detached task: it calls the upstream API and
   writes frames into the session channel.

Keeping them apart means a client disconnect (Starlette cancelling or
closing the body iterator) never cancels the relay mid-write. The iterator
only marks the channel disconnected, which fires the session token; the relay
notices, aborts the upstream call and unwinds through the session's scoped
cleanup.

RELAY OUTCOMES:
---------------
- upstream non-2xx          -> ``{"error": "Upstream error"}``
- 2xx without a body        -> ``{"error": "No stream from upstream"}``
- chunks then end of stream -> ``{"chunk": ...}`` frames, then ``[DONE]``
- timeout                   -> ``{"error": "AI request timed out"}``
- anything else             -> ``{"error": "Internal server error"}``
- client gone               -> nothing more is written

ARCHITECTURE:
-------------
Route -> StreamRelay -> GeminiClient -> Google Generative Language API
                     -> RelaySession (channel, token, heartbeat)
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import aclosing

import httpx

from gemini_proxy.core.config.constants import (
    ERROR_INTERNAL,
    ERROR_NO_STREAM,
    ERROR_TIMED_OUT,
    ERROR_UPSTREAM,
    CancelReason,
    Stage,
)
from gemini_proxy.core.config.settings import Settings
from gemini_proxy.core.exceptions import RequestCancelledError
from gemini_proxy.core.logging import get_logger, log_stage
from gemini_proxy.llm_stream.providers import GeminiClient, has_readable_body
from gemini_proxy.llm_stream.services import RelaySession

logger = get_logger(__name__)


class StreamRelay:
    """
    Relays upstream text output to a client as Server-Sent Events.

    USAGE:
    ------
    relay = StreamRelay(client, settings)
    session = relay.open_session(thread_id)
    return StreamingResponse(relay.stream(session, message), ...)
    """

    def __init__(self, client: GeminiClient, settings: Settings):
        self._client = client
        self._settings = settings
        self._tasks: set[asyncio.Task] = set()

        logger.info(
            "stream_relay_initialized",
            heartbeat_interval=settings.SSE_HEARTBEAT_INTERVAL,
            timeout_ms=settings.REQUEST_TIMEOUT,
        )

    @property
    def active_relays(self) -> int:
        return len(self._tasks)

    def open_session(self, thread_id: str | None = None) -> RelaySession:
        return RelaySession(self._settings.SSE_HEARTBEAT_INTERVAL, thread_id=thread_id)

    # ========================================================================
    # RESPONSE SIDE
    # ========================================================================

    async def stream(self, session: RelaySession, message: str) -> AsyncGenerator[str, None]:
        """
        Response body iterator: start the relay, then yield its frames.

        If iteration ends before the channel was drained, the client went
        away and the session is told so.
        """
        task = asyncio.create_task(self.relay(session, message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        try:
            async with aclosing(session.channel.frames()) as frames:
                async for frame in frames:
                    yield frame
        finally:
            if not session.channel.drained:
                session.client_disconnected()

    # ========================================================================
    # UPSTREAM SIDE
    # ========================================================================

    async def relay(self, session: RelaySession, message: str) -> None:
        """
        Call upstream and write the outcome into the session channel.

        Never raises for upstream or relay failures; they become in-band
        error events. Heartbeat stop and channel close happen in the
        session's ``__aexit__`` on every path.
        """
        thread_id = session.thread_id
        start_time = time.perf_counter()

        log_stage(logger, Stage.STREAM_RELAY, "stream_started", prompt_length=len(message), thread_id=thread_id)

        async with session:
            try:
                async with self._client.open(message, session.token) as upstream:
                    if not upstream.is_success:
                        body = await self._client.read_error_body(upstream, session.token)
                        logger.error(
                            "Upstream API error",
                            status_code=upstream.status_code,
                            body=body,
                            thread_id=thread_id,
                        )
                        await session.fail(ERROR_UPSTREAM)
                        return

                    if not has_readable_body(upstream):
                        logger.error(
                            "No stream from upstream",
                            status_code=upstream.status_code,
                            thread_id=thread_id,
                        )
                        await session.fail(ERROR_NO_STREAM)
                        return

                    await self._pump(session, upstream)

            except RequestCancelledError as e:
                if e.reason is CancelReason.CLIENT_DISCONNECTED:
                    logger.info("Upstream request aborted after client disconnect", thread_id=thread_id)
                else:
                    logger.warning("AI request timed out", timeout_ms=self._settings.REQUEST_TIMEOUT, thread_id=thread_id)
                    await session.fail(ERROR_TIMED_OUT)

            except httpx.TimeoutException as e:
                logger.warning("AI request timed out", error_type=type(e).__name__, thread_id=thread_id)
                await session.fail(ERROR_TIMED_OUT)

            except Exception as e:
                logger.exception("Stream relay failed", error_type=type(e).__name__, thread_id=thread_id)
                await session.fail(ERROR_INTERNAL)

            finally:
                log_stage(
                    logger,
                    Stage.STREAM_RELAY,
                    "stream_finished",
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                    disconnected=session.disconnected,
                    thread_id=thread_id,
                )

    async def _pump(self, session: RelaySession, upstream: httpx.Response) -> None:
        chunks = 0
        async with aclosing(self._client.iter_text(upstream, session.token)) as texts:
            async for text in texts:
                if not text:
                    continue
                if not await session.send_chunk(text):
                    log_stage(
                        logger,
                        Stage.STREAM_RELAY,
                        "stream_abandoned",
                        chunks_sent=chunks,
                        thread_id=session.thread_id,
                    )
                    return
                chunks += 1

        if session.disconnected:
            return

        await session.finish()
        log_stage(logger, Stage.STREAM_RELAY, "stream_completed", chunks_sent=chunks, thread_id=session.thread_id)

    async def shutdown(self) -> None:
        """Cancel relays still running at application shutdown and wait for them."""
        tasks = list(self._tasks)
        if not tasks:
            return

        logger.info("Cancelling active relays", count=len(tasks))
        for task in tasks:
            task.cancel()
        await asyncio.wait(tasks)
