"""
Cancellation Token - First-Wins Abort Signal for Upstream Calls

One token exists per inbound request. Any number of independent sources
(a timeout timer, a client-disconnect notification) may try to fire it; the
first one records its reason and every later attempt is a no-op.

In-flight upstream work is wrapped with ``guard()``, which races the work
against the token. When the token wins, the work is cancelled (httpx tears
down the connection) and ``RequestCancelledError`` carries the reason back
to the caller.

USAGE:
------
    token = CancellationToken()
    timer = token.cancel_after(30.0, CancelReason.TIMEOUT)
    try:
        response = await token.guard(client.send(request, stream=True))
    finally:
        timer.cancel()
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from gemini_proxy.core.config.constants import CancelReason
from gemini_proxy.core.exceptions import RequestCancelledError
from gemini_proxy.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def _unwind(work: asyncio.Future) -> None:
    """Cancel ``work`` and wait until it has finished tearing down."""
    work.cancel()
    await asyncio.wait({work})
    if not work.cancelled():
        # Consume the outcome so a late failure is not reported as unretrieved
        work.exception()


class CancellationToken:
    """
    Shared signal that tells an in-flight operation to abandon further work.

    Attributes:
        reason: The CancelReason of the trigger that fired first, or None
    """

    def __init__(self, thread_id: str | None = None):
        self.thread_id = thread_id
        self._event = asyncio.Event()
        self._reason: CancelReason | None = None

    @property
    def cancelled(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> CancelReason | None:
        return self._reason

    def cancel(self, reason: CancelReason) -> bool:
        """
        Fire the token.

        Returns:
            True if this call fired the token, False if it had already fired
        """
        if self._reason is not None:
            return False

        self._reason = reason
        self._event.set()
        logger.debug("cancellation_token_fired", reason=reason.value, thread_id=self.thread_id)
        return True

    def cancel_after(self, delay: float, reason: CancelReason) -> asyncio.TimerHandle:
        """
        Arm a timer that fires the token after ``delay`` seconds.

        The caller owns the returned handle and must cancel it once the
        guarded phase is over.
        """
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, self.cancel, reason)

    async def wait(self) -> CancelReason:
        await self._event.wait()
        return self._reason

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the token fires first.

        Raises:
            RequestCancelledError: The token fired before the work finished.
                The work has been cancelled and fully unwound.
            asyncio.CancelledError: The caller was cancelled; the work is
                unwound before this propagates.
        """
        if self._reason is not None:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise RequestCancelledError(self._reason, thread_id=self.thread_id)

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())

        try:
            done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await _unwind(work)
            raise
        finally:
            waiter.cancel()

        if work in done:
            return work.result()

        await _unwind(work)
        raise RequestCancelledError(self._reason, thread_id=self.thread_id)
