"""
Unit Tests for RelaySession and Heartbeat

Tests the terminal-event invariant, scoped cleanup and the keep-alive task.
"""

import asyncio
from unittest.mock import patch

import pytest

from gemini_proxy.core.config.constants import CancelReason
from gemini_proxy.llm_stream.services import EventChannel, Heartbeat, RelaySession
from tests.test_fixtures.upstream_factory import SSE_DONE, SSE_HEARTBEAT, sse_chunk, sse_error


async def drain(channel: EventChannel) -> list[str]:
    return [frame async for frame in channel.frames()]


@pytest.mark.unit
class TestRelaySessionTerminalEvents:
    """At most one terminal event is written."""

    @pytest.mark.asyncio
    async def test_chunks_then_done(self):
        session = RelaySession(heartbeat_interval=60)
        consumer = asyncio.create_task(drain(session.channel))

        async with session:
            assert await session.send_chunk("He") is True
            assert await session.send_chunk("llo") is True
            assert await session.finish() is True

        assert await consumer == [sse_chunk("He"), sse_chunk("llo"), SSE_DONE]
        assert session.terminal_sent is True

    @pytest.mark.asyncio
    async def test_second_terminal_event_is_dropped(self):
        session = RelaySession(heartbeat_interval=60)
        consumer = asyncio.create_task(drain(session.channel))

        async with session:
            assert await session.fail("Upstream error") is True
            assert await session.finish() is False
            assert await session.fail("Internal server error") is False

        assert await consumer == [sse_error("Upstream error")]

    @pytest.mark.asyncio
    async def test_no_chunks_after_terminal_event(self):
        session = RelaySession(heartbeat_interval=60)
        consumer = asyncio.create_task(drain(session.channel))

        async with session:
            await session.finish()
            assert await session.send_chunk("late") is False

        assert await consumer == [SSE_DONE]


@pytest.mark.unit
class TestRelaySessionDisconnect:
    """Client disconnect handling."""

    @pytest.mark.asyncio
    async def test_disconnect_fires_token(self):
        session = RelaySession(heartbeat_interval=60, thread_id="t-1")

        session.client_disconnected()

        assert session.disconnected is True
        assert session.token.reason is CancelReason.CLIENT_DISCONNECTED
        assert session.token.cancel(CancelReason.TIMEOUT) is False

    @pytest.mark.asyncio
    async def test_nothing_written_after_disconnect(self):
        session = RelaySession(heartbeat_interval=60)

        async with session:
            session.client_disconnected()

            assert await session.send_chunk("He") is False
            assert await session.fail("AI request timed out") is False
            assert await session.finish() is False

        assert session.terminal_sent is False

    @pytest.mark.asyncio
    async def test_disconnect_during_write_reports_failure(self):
        session = RelaySession(heartbeat_interval=60)
        frames = session.channel.frames()

        async with session:
            send = asyncio.create_task(session.send_chunk("He"))
            assert await frames.__anext__() == sse_chunk("He")

            session.client_disconnected()

            assert await send is False


@pytest.mark.unit
class TestRelaySessionCleanup:
    """Scoped cleanup on every exit path."""

    @pytest.mark.asyncio
    async def test_heartbeat_stopped_once_on_success(self):
        session = RelaySession(heartbeat_interval=60)
        consumer = asyncio.create_task(drain(session.channel))

        with patch.object(session.heartbeat, "stop", wraps=session.heartbeat.stop) as stop:
            async with session:
                assert session.heartbeat.running is True
                await session.finish()

        await consumer
        stop.assert_awaited_once()
        assert session.heartbeat.running is False
        assert session.channel.closed is True

    @pytest.mark.asyncio
    async def test_heartbeat_stopped_once_on_exception(self):
        session = RelaySession(heartbeat_interval=60)

        with patch.object(session.heartbeat, "stop", wraps=session.heartbeat.stop) as stop:
            with pytest.raises(RuntimeError):
                async with session:
                    raise RuntimeError("boom")

        stop.assert_awaited_once()
        assert session.heartbeat.running is False
        assert session.channel.closed is True


@pytest.mark.unit
class TestHeartbeat:
    """Test the keep-alive writer."""

    @pytest.mark.asyncio
    async def test_writes_comment_frames(self):
        channel = EventChannel()
        heartbeat = Heartbeat(channel, interval=0.01)
        frames = channel.frames()

        heartbeat.start()
        first = await asyncio.wait_for(frames.__anext__(), timeout=1)
        second = await asyncio.wait_for(frames.__anext__(), timeout=1)
        await heartbeat.stop()

        assert first == second == SSE_HEARTBEAT
        assert heartbeat.beats >= 1

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        heartbeat = Heartbeat(EventChannel(), interval=0.01)
        heartbeat.start()

        await heartbeat.stop()
        await heartbeat.stop()

        assert heartbeat.running is False

    @pytest.mark.asyncio
    async def test_stop_before_start(self):
        heartbeat = Heartbeat(EventChannel(), interval=0.01)

        await heartbeat.stop()
        heartbeat.start()

        assert heartbeat.running is False

    @pytest.mark.asyncio
    async def test_exits_when_channel_closed(self):
        channel = EventChannel()
        channel.close()
        heartbeat = Heartbeat(channel, interval=0.01)

        heartbeat.start()
        await asyncio.sleep(0.05)

        assert heartbeat.running is False
        assert heartbeat.beats == 0
