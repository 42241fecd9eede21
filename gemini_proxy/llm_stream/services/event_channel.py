"""
Event Channel - One-Directional Frame Pipe from Relay to HTTP Response

WHY A CHANNEL?
--------------
Two independent producers write into one SSE response: the relay (chunks,
errors, the completion marker) and the heartbeat task (keep-alive comments).
Starlette's StreamingResponse consumes a single async iterator, so both
producers push frames into this channel and the response drains it with
``frames()``.

WRITE SEMANTICS:
----------------
``send()`` returns only after the consumer has taken the frame and the
response has written it (the consumer resumes past its ``yield``). This gives
the relay natural backpressure: it does not read the next upstream chunk
until the previous one reached the client.

If the client is gone, ``send()`` raises ChannelClosedError. Frames already
queued or in flight fail the same way, so no producer waits forever on a
dead connection.

LIFECYCLE:
----------
- ``close()`` or ``send(frame, last=True)``: the relay is finished; the
  consumer drains what is queued, then stops. Later sends fail.
- ``abort()``: the client disconnected; everything pending fails and the
  registered disconnect callbacks run once.
"""

import asyncio
from collections.abc import AsyncIterator, Callable

from gemini_proxy.core.exceptions import ChannelClosedError
from gemini_proxy.core.logging import get_logger

logger = get_logger(__name__)

# Queue entry: (frame, written future); (None, None) marks end of stream
_Entry = tuple[str | None, asyncio.Future | None]


class EventChannel:
    """Ordered frame pipe with acknowledged writes."""

    def __init__(self, thread_id: str | None = None):
        self.thread_id = thread_id
        self._queue: asyncio.Queue[_Entry] = asyncio.Queue()
        self._in_flight: asyncio.Future | None = None
        self._closed = False
        self._disconnected = False
        self._drained = False
        self._disconnect_callbacks: list[Callable[[], None]] = []

    @property
    def closed(self) -> bool:
        """No further frames will be accepted."""
        return self._closed

    @property
    def disconnected(self) -> bool:
        """The consumer went away before the channel was drained."""
        return self._disconnected

    @property
    def drained(self) -> bool:
        """The consumer read everything up to the end-of-stream marker."""
        return self._drained

    def on_disconnect(self, callback: Callable[[], None]) -> None:
        self._disconnect_callbacks.append(callback)

    async def send(self, frame: str, last: bool = False) -> None:
        """
        Write one frame and wait until the consumer has delivered it.

        Args:
            frame: Wire text of the frame
            last: Close the channel right behind this frame, so no other
                producer can queue anything after it

        Raises:
            ChannelClosedError: The channel is closed or the client is gone
        """
        if self._closed:
            raise ChannelClosedError("Event channel is closed", thread_id=self.thread_id)

        written = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((frame, written))
        if last:
            self.close()
        await written

    def close(self) -> None:
        """Mark end of stream. Frames already queued are still delivered."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait((None, None))

    def abort(self) -> None:
        """
        The client disconnected: fail every pending write and notify listeners.

        Idempotent; a channel that was fully drained is not considered
        disconnected.
        """
        if self._disconnected or self._drained:
            return

        self._closed = True
        self._disconnected = True

        pending = [self._in_flight] if self._in_flight is not None else []
        self._in_flight = None
        while not self._queue.empty():
            _, written = self._queue.get_nowait()
            if written is not None:
                pending.append(written)

        for written in pending:
            if not written.done():
                written.set_exception(
                    ChannelClosedError("Client disconnected", thread_id=self.thread_id)
                )

        # Unblock a consumer that is still iterating
        self._queue.put_nowait((None, None))

        logger.info("client_disconnected", pending_frames=len(pending), thread_id=self.thread_id)

        for callback in self._disconnect_callbacks:
            callback()

    async def frames(self) -> AsyncIterator[str]:
        """
        Yield frames in write order until end of stream.

        The response body iterator. Each frame's writer is released once
        iteration resumes, i.e. after the server has sent the frame.
        """
        while True:
            frame, written = await self._queue.get()
            if frame is None:
                self._drained = True
                return

            self._in_flight = written
            yield frame
            self._in_flight = None
            if not written.done():
                written.set_result(None)
