"""
Pull-side view of a duplex chat session.

Events are pushed by the session's reader task whenever they arrive; the
consumer pulls chunks with ``async for``. Chunks that arrive before they are
requested wait in an ordered buffer; a consumer that is already waiting gets
the next chunk handed to it directly. Unrecognized frames keep their place in
that order; they are logged, passed to ``on_unknown_frame`` if set, and skipped.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional, Union

from levee.errors import ProtocolError, RemoteError, StreamAbortedError
from levee.schemas.chat import ChatInput, ChatResponse, StreamChunk
from levee.streaming.events import (
    Aborted,
    Chunk,
    Completion,
    ErrorEvent,
    SessionStarted,
    StreamEvent,
    UnknownFrame,
)
from levee.streaming.session import DuplexSession

logger = logging.getLogger(__name__)

_END = object()

UnknownFrameHook = Callable[[UnknownFrame], Union[None, Awaitable[None]]]


class ChatStream:
    """
    Lazy, single-use sequence of ``StreamChunk`` ending in a ``ChatResponse``.

    Usage:
        async with llm.chat_stream(chat_input) as stream:
            async for chunk in stream:
                print(chunk.content, end="")
        print(stream.response.output_tokens)

    The session is started on the first pull (or an explicit ``start()``).
    A remote error is raised from the pull that would have produced the next
    chunk; in that case no response is ever set.
    """

    def __init__(
        self,
        session: DuplexSession,
        chat_input: ChatInput,
        on_unknown_frame: Optional[UnknownFrameHook] = None,
    ):
        self._session = session
        self._input = chat_input
        self.on_unknown_frame = on_unknown_frame
        self._buffer: Deque[Union[StreamChunk, UnknownFrame]] = deque()
        self._waiter: Optional[asyncio.Future] = None
        self._terminal: Optional[StreamEvent] = None
        self._transport_ended = False
        self._started = False
        self._finished = False
        self._response: Optional[ChatResponse] = None
        session.attach(self)

    @property
    def session(self) -> DuplexSession:
        return self._session

    @property
    def response(self) -> ChatResponse:
        """Aggregate result; available once iteration has ended cleanly."""
        if self._response is None:
            raise ProtocolError("stream has not completed")
        return self._response

    @property
    def model(self) -> Optional[str]:
        return self._session.model or self._input.model

    # -- push side (called by the session) --

    def feed(self, event: StreamEvent) -> None:
        if isinstance(event, SessionStarted):
            return
        if isinstance(event, Chunk):
            self._deliver(event.to_stream_chunk())
            return
        if isinstance(event, UnknownFrame):
            self._deliver(event)
            return
        self._terminal = event
        self._wake(_END)

    def feed_end(self) -> None:
        self._transport_ended = True
        self._wake(_END)

    def _deliver(self, item: Union[StreamChunk, UnknownFrame]) -> None:
        if self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(item)
        else:
            self._buffer.append(item)

    def _wake(self, item: Any) -> None:
        if self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(item)

    # -- pull side --

    async def start(self) -> None:
        """Start the underlying session; raises ConnectionError if it cannot."""
        if self._started:
            return
        self._started = True
        try:
            await self._session.start(self._input)
        except Exception:
            self._finished = True
            raise

    def __aiter__(self) -> "ChatStream":
        return self

    async def __anext__(self) -> StreamChunk:
        if self._finished:
            raise StopAsyncIteration
        if not self._started:
            await self.start()

        while True:
            item = await self._pull()
            if item is _END:
                await self._finish()
                raise StopAsyncIteration
            if isinstance(item, UnknownFrame):
                await self._skip_unknown(item)
                continue
            return item  # type: ignore[return-value]

    async def _pull(self) -> Union[StreamChunk, UnknownFrame, object]:
        if self._buffer:
            return self._buffer.popleft()
        if self._terminal is not None or self._transport_ended:
            return _END

        self._waiter = asyncio.get_running_loop().create_future()
        try:
            return await self._waiter
        finally:
            self._waiter = None

    async def _skip_unknown(self, frame: UnknownFrame) -> None:
        logger.warning(f"Chat stream {self._session.request_id} ignored {frame.message}")
        if self.on_unknown_frame is None:
            return
        result = self.on_unknown_frame(frame)
        if inspect.isawaitable(result):
            await result

    async def _finish(self) -> None:
        self._finished = True
        await self._session.close()

        terminal = self._terminal
        if isinstance(terminal, Completion):
            self._response = terminal.to_response(model=self.model)
            return
        if isinstance(terminal, ErrorEvent):
            raise RemoteError(terminal.code, terminal.message, terminal.retryable)
        if isinstance(terminal, Aborted):
            raise StreamAbortedError(terminal.reason)
        logger.debug(f"Chat stream {self._session.request_id} ended without a terminal event")
        raise ProtocolError("stream ended without completion")

    # -- control --

    def abort(self, reason: Optional[str] = None) -> None:
        """Advisory cancellation; keep pulling to see the terminal outcome."""
        self._session.abort(reason)

    async def aclose(self) -> None:
        self._finished = True
        await self._session.close()

    async def __aenter__(self) -> "ChatStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
