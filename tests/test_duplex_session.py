"""
Tests for DuplexSession: start/abort frames, event delivery order, terminal
handling and close semantics.
"""

import pytest

from fakes import FakeTransport, aborted, chunk, completion, error, session_started, settle
from levee.errors import ConnectionError, ProtocolError
from levee.schemas.chat import ChatInput
from levee.streaming.events import Aborted, Chunk, Completion, ErrorEvent, SessionStarted
from levee.streaming.session import TRANSPORT_ERROR, DuplexSession, SessionState

pytestmark = pytest.mark.asyncio


class RecordingListener:
    def __init__(self):
        self.events = []
        self.ended = 0

    def feed(self, event) -> None:
        self.events.append(event)

    def feed_end(self) -> None:
        self.ended += 1


def make_session(transport: FakeTransport, api_key: str = "lv_test"):
    session = DuplexSession(transport, api_key)
    listener = RecordingListener()
    session.attach(listener)
    return session, listener


HELLO = ChatInput(messages=[{"role": "user", "content": "Hi"}], system_prompt="Be brief", model="fast")


class TestStart:
    """Opening the call and writing the start frame."""

    async def test_start_frame_is_camel_case(self) -> None:
        """The start frame uses camelCase keys."""
        transport = FakeTransport()
        session, _ = make_session(transport)

        await session.start(HELLO, request_id="req-1")

        start = transport.call.written[0]["start"]
        assert start["systemPrompt"] == "Be brief"
        assert start["model"] == "fast"
        assert start["messages"] == [{"role": "user", "content": "Hi"}]
        assert start["apiKey"] == "lv_test"
        assert start["requestId"] == "req-1"
        assert "maxTokens" not in start
        assert session.state is SessionState.ACTIVE
        await session.close()

    async def test_request_id_generated(self) -> None:
        """Each session gets a request id."""
        session, _ = make_session(FakeTransport())
        await session.start(HELLO)
        assert session.request_id
        await session.close()

    async def test_double_start_rejected(self) -> None:
        """A second start raises ProtocolError."""
        transport = FakeTransport()
        session, _ = make_session(transport)
        await session.start(HELLO)

        with pytest.raises(ProtocolError, match="already started"):
            await session.start(HELLO)

        assert len(transport.calls) == 1
        await session.close()

    async def test_start_without_listener(self) -> None:
        """Starting requires an attached listener."""
        session = DuplexSession(FakeTransport(), "lv_test")
        with pytest.raises(ProtocolError):
            await session.start(HELLO)

    async def test_start_after_close(self) -> None:
        """A closed session cannot be started."""
        session, _ = make_session(FakeTransport())
        await session.close()
        with pytest.raises(ProtocolError, match="closed"):
            await session.start(HELLO)

    async def test_unreachable_transport(self) -> None:
        """Connection failures surface from start and mark the session errored."""
        session, listener = make_session(FakeTransport(open_error=ConnectionError("unreachable")))

        with pytest.raises(ConnectionError):
            await session.start(HELLO)

        assert session.state is SessionState.ERRORED
        await session.close()
        assert listener.events == []
        assert listener.ended == 0

    async def test_start_write_failure_cancels_call(self) -> None:
        """A failed start write cancels the call."""
        transport = FakeTransport(write_error=ConnectionError("reset"))
        session, _ = make_session(transport)

        with pytest.raises(ConnectionError):
            await session.start(HELLO)

        assert transport.call.cancelled is True


class TestEventDelivery:
    """Inbound frames reach the listener in arrival order."""

    async def test_events_in_order(self) -> None:
        """Events reach the listener in frame order."""
        transport = FakeTransport(script=[session_started(), chunk("He", 0), chunk("llo", 1), completion("Hello")])
        session, listener = make_session(transport)

        await session.start(HELLO)
        await settle(lambda: len(listener.events) == 4)

        assert isinstance(listener.events[0], SessionStarted)
        assert listener.events[1:3] == [Chunk("He", 0), Chunk("llo", 1)]
        assert isinstance(listener.events[3], Completion)
        assert session.state is SessionState.COMPLETED
        assert session.session_id == "sess-1"
        assert session.model == "balanced"
        await session.close()

    async def test_frames_after_terminal_are_dropped(self) -> None:
        """Nothing is delivered after a terminal event."""
        transport = FakeTransport(script=[chunk("a", 0), error("rate_limited", "slow down", True)])
        session, listener = make_session(transport)

        await session.start(HELLO)
        await settle(lambda: len(listener.events) == 2)
        transport.call.push(chunk("late", 1))
        transport.call.push(completion("late"))
        await settle()

        assert len(listener.events) == 2
        assert listener.events[-1] == ErrorEvent("rate_limited", "slow down", True)
        assert session.state is SessionState.ERRORED
        await session.close()

    async def test_unknown_frame_is_not_terminal(self) -> None:
        """An unknown frame is passed on and later frames still arrive."""
        transport = FakeTransport(script=[chunk("a", 0), {"toolCall": {"id": "t"}}, chunk("b", 1), completion("ab")])
        session, listener = make_session(transport)

        await session.start(HELLO)
        await settle(lambda: len(listener.events) == 4)

        assert [type(e).__name__ for e in listener.events] == ["Chunk", "UnknownFrame", "Chunk", "Completion"]
        assert listener.events[1].kind == "toolCall"
        assert session.state is SessionState.COMPLETED
        await session.close()

    async def test_read_failure_becomes_transport_error(self) -> None:
        """A read failure ends the session with transport_error."""
        transport = FakeTransport(script=[chunk("a", 0), ConnectionError("stream reset")])
        session, listener = make_session(transport)

        await session.start(HELLO)
        await settle(lambda: len(listener.events) == 2)

        last = listener.events[-1]
        assert isinstance(last, ErrorEvent)
        assert last.code == TRANSPORT_ERROR
        assert last.retryable is True
        await session.close()

    async def test_eof_without_terminal(self) -> None:
        """EOF without a terminal frame signals feed_end."""
        transport = FakeTransport(script=[chunk("a", 0), None])
        session, listener = make_session(transport)

        await session.start(HELLO)
        await settle(lambda: listener.ended == 1)

        assert listener.events == [Chunk("a", 0)]
        assert session.state is SessionState.ERRORED
        await session.close()
        assert listener.ended == 1


class TestAbort:
    """Advisory abort: frame is sent, in-flight chunks still arrive."""

    async def test_abort_sends_frame_once(self) -> None:
        """Repeated aborts write one abort frame."""
        transport = FakeTransport()
        session, _ = make_session(transport)
        await session.start(HELLO)

        session.abort("user")
        session.abort("again")
        await settle(lambda: transport.call.abort_frames)

        assert transport.call.abort_frames == [{"abort": {"reason": "user"}}]
        await session.close()

    async def test_abort_before_start_is_ignored(self) -> None:
        """Abort before start writes nothing."""
        session, _ = make_session(FakeTransport())
        session.abort("early")
        assert session.abort_requested is False

    async def test_late_chunks_then_aborted(self) -> None:
        """Chunks in flight after abort are still delivered."""
        transport = FakeTransport(script=[chunk("a", 0)])
        session, listener = make_session(transport)
        await session.start(HELLO)
        await settle(lambda: listener.events)

        session.abort("stop")
        transport.call.push(chunk("b", 1))
        transport.call.push(aborted("stop"))
        await settle(lambda: len(listener.events) == 3)

        assert listener.events == [Chunk("a", 0), Chunk("b", 1), Aborted("stop")]
        assert session.state is SessionState.ABORTED
        await session.close()

    async def test_eof_after_abort_is_aborted(self) -> None:
        """EOF after abort is reported as Aborted."""
        transport = FakeTransport()
        session, listener = make_session(transport)
        await session.start(HELLO)

        session.abort("user")
        transport.call.end()
        await settle(lambda: listener.events)

        assert listener.events == [Aborted("user")]
        assert listener.ended == 0
        await session.close()

    async def test_close_flushes_pending_abort(self) -> None:
        """close() waits for a pending abort write."""
        transport = FakeTransport()
        session, _ = make_session(transport)
        await session.start(HELLO)

        session.abort("bye")
        await session.close()

        assert transport.call.abort_frames == [{"abort": {"reason": "bye"}}]
        assert transport.call.cancelled is True


class TestClose:
    """Session teardown."""

    async def test_close_is_idempotent(self) -> None:
        """Closing twice ends the listener once."""
        transport = FakeTransport(script=[chunk("a", 0)])
        session, listener = make_session(transport)
        await session.start(HELLO)
        await settle(lambda: listener.events)

        await session.close()
        await session.close()

        assert session.closed is True
        assert transport.call.cancelled is True
        assert listener.ended == 1

    async def test_close_unstarted(self) -> None:
        """Closing an unstarted session is a no-op."""
        session, listener = make_session(FakeTransport())
        await session.close()
        assert listener.ended == 0
        assert session.state is SessionState.UNSTARTED

    async def test_no_events_after_close(self) -> None:
        """Frames after close are not delivered."""
        transport = FakeTransport()
        session, listener = make_session(transport)
        await session.start(HELLO)
        await session.close()

        transport.call.push(chunk("ghost", 0))
        await settle()

        assert listener.events == []

    async def test_second_listener_rejected(self) -> None:
        """Only one listener can attach."""
        session, _ = make_session(FakeTransport())
        with pytest.raises(ProtocolError):
            session.attach(RecordingListener())
