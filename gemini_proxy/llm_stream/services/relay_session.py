"""
Relay Session - Per-Request State of One Streaming Relay

A RelaySession bundles everything a single ``/api/gemini_stream`` request
owns and nothing else:

- ``channel``: EventChannel to the client (its ``disconnected`` flag is the
  client-connected flag)
- ``token``: CancellationToken for the upstream call
- ``heartbeat``: periodic keep-alive writer
- a terminal-sent flag

SCOPED CLEANUP:
---------------
The session is an async context manager. Entering starts the heartbeat;
leaving stops it and closes the channel. Every exit path of the relay
(success, upstream error, disconnect, timeout, unexpected exception) goes
through ``__aexit__``, so cleanup is never repeated per branch.

TERMINAL EVENTS:
----------------
At most one terminal event is written: either the ``[DONE]`` marker or a
single error event. Nothing terminal is written once the client is gone.
"""

import asyncio

from gemini_proxy.core.config.constants import CancelReason, Stage
from gemini_proxy.core.exceptions import ChannelClosedError
from gemini_proxy.core.logging import get_logger, log_stage
from gemini_proxy.core.resilience import CancellationToken
from gemini_proxy.llm_stream.models import SSEEvent, format_comment
from gemini_proxy.llm_stream.services.event_channel import EventChannel

logger = get_logger(__name__)


class Heartbeat:
    """
    Writes a keep-alive comment into the channel every ``interval`` seconds.

    Intermediary proxies and browsers drop idle connections; a comment line
    keeps bytes flowing while the upstream is still thinking, and
    EventSource clients ignore it.
    """

    def __init__(self, channel: EventChannel, interval: float, thread_id: str | None = None):
        self._channel = channel
        self._interval = interval
        self._thread_id = thread_id
        self._task: asyncio.Task | None = None
        self._stopped = False
        self.beats = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is None and not self._stopped:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the heartbeat and wait for its task to finish. Idempotent."""
        if self._stopped:
            return
        self._stopped = True

        if self._task is None:
            return

        self._task.cancel()
        await asyncio.wait({self._task})

        if not self._task.cancelled() and self._task.exception() is not None:
            logger.error(
                "heartbeat_failed",
                error=str(self._task.exception()),
                thread_id=self._thread_id,
            )

    async def _run(self) -> None:
        frame = format_comment()
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._channel.send(frame)
            except ChannelClosedError:
                return
            self.beats += 1
            log_stage(logger, Stage.HEARTBEAT, "heartbeat_sent", level="debug", thread_id=self._thread_id)


class RelaySession:
    """
    State of one streaming relay, created on request receipt.

    Usage:
        session = RelaySession(heartbeat_interval=15.0, thread_id=thread_id)
        async with session:
            ...
            await session.send_chunk("He")
            await session.finish()
    """

    def __init__(self, heartbeat_interval: float, thread_id: str | None = None):
        self.thread_id = thread_id
        self.channel = EventChannel(thread_id=thread_id)
        self.token = CancellationToken(thread_id=thread_id)
        self.heartbeat = Heartbeat(self.channel, heartbeat_interval, thread_id=thread_id)
        self._terminal_sent = False

        self.channel.on_disconnect(self._on_client_disconnect)

    @property
    def disconnected(self) -> bool:
        return self.channel.disconnected

    @property
    def terminal_sent(self) -> bool:
        return self._terminal_sent

    def client_disconnected(self) -> None:
        """Called by the response side when the client connection goes away."""
        self.channel.abort()

    def _on_client_disconnect(self) -> None:
        if self.token.cancel(CancelReason.CLIENT_DISCONNECTED):
            logger.info("Client disconnected, aborting upstream request", thread_id=self.thread_id)

    async def __aenter__(self) -> "RelaySession":
        self.heartbeat.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.heartbeat.stop()
        self.channel.close()

        log_stage(
            logger,
            Stage.CLEANUP,
            "relay_session_closed",
            terminal_sent=self._terminal_sent,
            disconnected=self.disconnected,
            heartbeats=self.heartbeat.beats,
            thread_id=self.thread_id,
        )
        return False

    async def send_chunk(self, text: str) -> bool:
        """
        Relay one upstream chunk.

        Returns:
            False if the client is gone; the caller must stop reading upstream
        """
        if self.disconnected or self._terminal_sent:
            return False

        try:
            await self.channel.send(SSEEvent.chunk(text).format())
        except ChannelClosedError as e:
            logger.warning("Failed to write chunk to client", error=e.message, thread_id=self.thread_id)
            return False
        return True

    async def finish(self) -> bool:
        """Write the ``[DONE]`` completion marker."""
        return await self._send_terminal(SSEEvent.done())

    async def fail(self, message: str) -> bool:
        """Write a single ``{"error": message}`` event."""
        return await self._send_terminal(SSEEvent.error(message))

    async def _send_terminal(self, event: SSEEvent) -> bool:
        if self._terminal_sent or self.disconnected:
            return False
        self._terminal_sent = True

        try:
            await self.channel.send(event.format(), last=True)
        except ChannelClosedError:
            logger.debug("terminal_event_not_delivered", thread_id=self.thread_id)
            return False
        return True
