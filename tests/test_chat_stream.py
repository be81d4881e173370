"""
Tests for ChatStream, the pull-side adapter over a duplex session.

Covers ordering, buffering of chunks that arrive before they are pulled,
terminal outcomes (completion, remote error, abort, missing completion) and
single-use semantics.
"""

import asyncio

import pytest

from fakes import FakeTransport, aborted, chunk, completion, error, session_started, settle
from levee.errors import ConnectionError, ProtocolError, RemoteError, StreamAbortedError
from levee.schemas.chat import ChatInput
from levee.streaming.adapter import ChatStream
from levee.streaming.session import DuplexSession

pytestmark = pytest.mark.asyncio

HI = ChatInput(messages=[{"role": "user", "content": "Hi"}], model="fast")


def open_stream(transport: FakeTransport, chat_input: ChatInput = HI) -> ChatStream:
    return ChatStream(DuplexSession(transport, "lv_test"), chat_input)


async def collect(stream: ChatStream) -> list:
    return [c.content async for c in stream]


class TestHappyPath:
    """Normal streams: ordering, buffering and the aggregate response."""

    async def test_hello_scenario(self) -> None:
        """Two chunks then a completion: 'He' + 'llo' and the aggregate result."""
        transport = FakeTransport(
            script=[session_started(model="fast"), chunk("He", 0), chunk("llo", 1), completion("Hello", outputTokens=2)]
        )
        stream = open_stream(transport)

        contents = await collect(stream)

        assert contents == ["He", "llo"]
        assert stream.response.content == "Hello"
        assert stream.response.output_tokens == 2
        assert stream.response.stop_reason == "end_turn"
        assert stream.response.model == "fast"

    async def test_chunk_indices_in_arrival_order(self) -> None:
        """Chunks keep the order they arrived in."""
        frames = [chunk(str(i), i) for i in range(20)] + [completion("x")]
        stream = open_stream(FakeTransport(script=frames))

        indices = [c.index async for c in stream]

        assert indices == list(range(20))

    async def test_session_starts_lazily(self) -> None:
        """No call is opened until the first pull."""
        transport = FakeTransport(script=[completion("")])
        stream = open_stream(transport)

        assert transport.calls == []
        await collect(stream)
        assert len(transport.calls) == 1

    async def test_completion_without_chunks(self) -> None:
        """A bare completion ends iteration with a response."""
        stream = open_stream(FakeTransport(script=[completion("")]))
        assert await collect(stream) == []
        assert stream.response.content == ""

    async def test_model_falls_back_to_input(self) -> None:
        """Without a started frame the requested model is reported."""
        stream = open_stream(FakeTransport(script=[completion("ok")]))
        await collect(stream)
        assert stream.response.model == "fast"


class TestBuffering:
    """Chunks that arrive before they are requested are not lost."""

    async def test_chunks_buffered_before_first_pull(self) -> None:
        """Chunks that arrive early wait in the buffer."""
        transport = FakeTransport()
        stream = open_stream(transport)
        await stream.start()

        for i, text in enumerate(["a", "b", "c"]):
            transport.call.push(chunk(text, i))
        await settle()

        first = await stream.__anext__()
        assert first.content == "a"

        transport.call.push(completion("abc"))
        rest = await collect(stream)

        assert rest == ["b", "c"]
        assert stream.response.content == "abc"

    async def test_waiting_consumer_receives_next_chunk(self) -> None:
        """A pending pull is resolved directly by the next chunk."""
        transport = FakeTransport()
        stream = open_stream(transport)
        await stream.start()

        pending = asyncio.ensure_future(stream.__anext__())
        await settle()
        assert not pending.done()

        transport.call.push(chunk("x", 0))
        result = await asyncio.wait_for(pending, timeout=1)

        assert result.content == "x"
        await stream.aclose()


class TestTerminalOutcomes:
    """Error, abort and missing-completion endings."""

    async def test_remote_error_after_chunks(self) -> None:
        """An error frame raises RemoteError after the earlier chunks."""
        transport = FakeTransport(script=[chunk("a", 0), error("rate_limited", "slow down", retryable=True)])
        stream = open_stream(transport)
        seen = []

        with pytest.raises(RemoteError) as exc_info:
            async for c in stream:
                seen.append(c.content)

        assert seen == ["a"]
        assert exc_info.value.code == "rate_limited"
        assert exc_info.value.retryable is True
        with pytest.raises(ProtocolError):
            stream.response

    async def test_unknown_frame_is_skipped(self) -> None:
        """Chunk, unknown, chunk, completion yields both chunks and a response."""
        transport = FakeTransport(script=[chunk("a", 0), {"mystery": {}}, chunk("b", 1), completion("ab")])
        stream = open_stream(transport)

        assert await collect(stream) == ["a", "b"]
        assert stream.response.content == "ab"

    async def test_unknown_frame_hook_runs_in_order(self) -> None:
        """The hook sees each unknown frame between the chunks around it."""
        transport = FakeTransport(script=[chunk("a", 0), {"mystery": {}}, chunk("b", 1), completion("ab")])
        seen = []

        async def on_unknown(frame) -> None:
            seen.append(f"?{frame.kind}")

        stream = ChatStream(DuplexSession(transport, "lv_test"), HI, on_unknown_frame=on_unknown)
        async for c in stream:
            seen.append(c.content)

        assert seen == ["a", "?mystery", "b"]

    async def test_end_without_completion(self) -> None:
        """EOF with no terminal frame raises ProtocolError."""
        stream = open_stream(FakeTransport(script=[chunk("a", 0), None]))
        seen = []

        with pytest.raises(ProtocolError, match="without completion"):
            async for c in stream:
                seen.append(c.content)

        assert seen == ["a"]

    async def test_abort_with_late_chunks(self) -> None:
        """Chunks already in flight when abort is requested are still yielded."""
        transport = FakeTransport(script=[chunk("a", 0)])
        stream = open_stream(transport)
        seen = []

        with pytest.raises(StreamAbortedError) as exc_info:
            async for c in stream:
                seen.append(c.content)
                if c.index == 0:
                    stream.abort("user")
                    transport.call.push(chunk("b", 1))
                    transport.call.push(aborted("user"))

        assert seen == ["a", "b"]
        assert exc_info.value.reason == "user"
        assert transport.call.abort_frames == [{"abort": {"reason": "user"}}]

    async def test_start_failure(self) -> None:
        """A failed start propagates and leaves the stream finished."""
        stream = open_stream(FakeTransport(open_error=ConnectionError("unreachable")))

        with pytest.raises(ConnectionError):
            await collect(stream)

        assert await collect(stream) == []


class TestSingleUse:
    """A stream is consumed once."""

    async def test_exhausted_stream_yields_nothing(self) -> None:
        """Iterating again after completion ends immediately."""
        transport = FakeTransport(script=[chunk("a", 0), completion("a")])
        stream = open_stream(transport)

        assert await collect(stream) == ["a"]
        assert await collect(stream) == []
        assert len(transport.calls) == 1

    async def test_response_before_completion(self) -> None:
        """Reading response early raises ProtocolError."""
        stream = open_stream(FakeTransport())
        with pytest.raises(ProtocolError, match="not completed"):
            stream.response

    async def test_context_manager_releases_call(self) -> None:
        """Leaving the context cancels the underlying call."""
        transport = FakeTransport(script=[chunk("a", 0)])

        async with open_stream(transport) as stream:
            first = await stream.__anext__()

        assert first.content == "a"
        assert transport.call.cancelled is True
        assert stream.session.closed is True
