"""
Duplex chat session.

Owns one bidirectional ``Chat`` call for a single conversation turn: writes
the start and abort frames, runs a reader task that decodes inbound frames
into events, and pushes those events to one attached listener.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from enum import Enum
from typing import Any, Optional, Protocol

from levee.errors import LeveeError, ProtocolError
from levee.schemas.chat import ChatInput
from levee.streaming.events import (
    Aborted,
    Completion,
    ErrorEvent,
    SessionStarted,
    StreamEvent,
    UnknownFrame,
    decode_frame,
    is_terminal,
)

logger = logging.getLogger(__name__)

TRANSPORT_ERROR = "transport_error"
ABORT_FLUSH_SECONDS = 1.0


class SessionState(str, Enum):
    UNSTARTED = "unstarted"
    ACTIVE = "active"
    COMPLETED = "completed"
    ERRORED = "errored"
    ABORTED = "aborted"


class SessionListener(Protocol):
    def feed(self, event: StreamEvent) -> None: ...

    def feed_end(self) -> None: ...


class DuplexSession:
    """
    One logical chat turn over a duplex transport call.

    Events are delivered to the attached listener in arrival order. At most
    one terminal event (completion, error, aborted) is delivered; anything
    after it is dropped. If the transport ends without a terminal event the
    listener's ``feed_end`` is called instead.
    """

    def __init__(self, transport: Any, api_key: str):
        self._transport = transport
        self._api_key = api_key
        self._listener: Optional[SessionListener] = None
        self._call: Any = None
        self._reader: Optional[asyncio.Task] = None
        self._abort_task: Optional[asyncio.Task] = None
        self._state = SessionState.UNSTARTED
        self._start_requested = False
        self._terminated = False
        self._closed = False
        self._abort_reason: Optional[str] = None
        self.session_id: Optional[str] = None
        self.provider: Optional[str] = None
        self.model: Optional[str] = None
        self.request_id: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def abort_requested(self) -> bool:
        return self._abort_reason is not None

    def attach(self, listener: SessionListener) -> None:
        if self._listener is not None and self._listener is not listener:
            raise ProtocolError("session already has a listener")
        self._listener = listener

    def _start_frame(self, chat_input: ChatInput) -> dict:
        payload = chat_input.to_wire()
        payload["messages"] = [m.to_wire() for m in chat_input.messages]
        payload["apiKey"] = self._api_key
        if self.request_id:
            payload["requestId"] = self.request_id
        return {"start": payload}

    async def start(self, chat_input: ChatInput, request_id: Optional[str] = None) -> None:
        """
        Open the call and send the start frame.

        Raises:
            ProtocolError: Already started, or no listener attached
            ConnectionError: Transport could not be established
        """
        if self._start_requested:
            raise ProtocolError("already started")
        if self._closed:
            raise ProtocolError("session is closed")
        if self._listener is None:
            raise ProtocolError("no listener attached to session")
        self._start_requested = True
        self.request_id = request_id or uuid.uuid4().hex

        try:
            self._call = await self._transport.open_chat()
            await self._call.write(self._start_frame(chat_input))
        except LeveeError:
            self._state = SessionState.ERRORED
            self._terminated = True
            self._cancel_call()
            raise

        self._state = SessionState.ACTIVE
        self._reader = asyncio.create_task(self._read_loop(), name=f"levee-chat-{self.request_id}")
        logger.info(
            f"Chat session started (request_id={self.request_id}, "
            f"model={chat_input.model}, messages={len(chat_input.messages)})"
        )

    async def _read_loop(self) -> None:
        while not self._terminated:
            try:
                frame = await self._call.read()
            except asyncio.CancelledError:
                raise
            except LeveeError as e:
                logger.warning(f"Chat stream transport error: {e}")
                self._dispatch(ErrorEvent(TRANSPORT_ERROR, str(e), retryable=True))
                return
            except Exception as e:
                logger.exception("Unexpected failure reading chat stream")
                self._dispatch(ErrorEvent(TRANSPORT_ERROR, str(e), retryable=True))
                return

            if frame is None:
                self._end_without_terminal()
                return
            self._dispatch(decode_frame(frame))

    def _dispatch(self, event: StreamEvent) -> None:
        if self._terminated:
            logger.debug(f"Dropping {type(event).__name__} after terminal event")
            return

        if isinstance(event, SessionStarted):
            self.session_id = event.session_id
            self.provider = event.provider
            self.model = event.model
        elif isinstance(event, Completion):
            self._state = SessionState.COMPLETED
        elif isinstance(event, ErrorEvent):
            self._state = SessionState.ERRORED
        elif isinstance(event, Aborted):
            self._state = SessionState.ABORTED
        elif isinstance(event, UnknownFrame):
            logger.debug(f"Chat session {self.request_id} passed on unknown frame {event.kind!r}")

        if is_terminal(event):
            self._terminated = True
            logger.info(f"Chat session {self.request_id} ended: {self._state.value}")

        if self._listener is not None:
            self._listener.feed(event)

    def _end_without_terminal(self) -> None:
        if self._terminated or self._state is SessionState.UNSTARTED:
            return
        if self.abort_requested:
            self._dispatch(Aborted(reason=self._abort_reason or ""))
            return
        self._terminated = True
        self._state = SessionState.ERRORED
        logger.warning(f"Chat session {self.request_id} ended without completion")
        if self._listener is not None:
            self._listener.feed_end()

    def abort(self, reason: Optional[str] = None) -> None:
        """
        Ask the remote side to stop generating.

        Does not wait for the write; chunks already in flight are still
        delivered until a terminal event arrives.
        """
        if self._state is not SessionState.ACTIVE or self._terminated or self._closed:
            return
        if self.abort_requested:
            return
        self._abort_reason = reason or ""
        frame = {"abort": {"reason": reason} if reason else {}}
        self._abort_task = asyncio.get_running_loop().create_task(self._send_abort(frame))
        logger.info(f"Abort requested for chat session {self.request_id}: {reason or '-'}")

    async def _send_abort(self, frame: dict) -> None:
        try:
            await self._call.write(frame)
        except LeveeError as e:
            logger.warning(f"Failed to send abort for chat session {self.request_id}: {e}")

    def _cancel_call(self) -> None:
        if self._call is not None:
            self._call.cancel()

    async def close(self) -> None:
        """Release the transport call. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        current = asyncio.current_task()
        if self._abort_task is not None and self._abort_task is not current:
            # Give a pending abort frame a chance to reach the remote side.
            await asyncio.wait({self._abort_task}, timeout=ABORT_FLUSH_SECONDS)
        for task in (self._abort_task, self._reader):
            if task is None or task is current or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._cancel_call()
        self._end_without_terminal()
        logger.debug(f"Chat session {self.request_id} closed")
