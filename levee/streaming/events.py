"""
Transport events for the duplex chat stream.

Each inbound frame carries exactly one of five payloads. They are decoded
into a closed set of frozen dataclasses so consumers can match on type
instead of inspecting optional fields. Frames that match none of them decode
to UnknownFrame, which is reported but does not end the stream.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Union

from levee.schemas.chat import ChatResponse, StreamChunk

logger = logging.getLogger(__name__)

UNKNOWN_FRAME = "unknown_frame"


@dataclass(frozen=True)
class SessionStarted:
    session_id: str
    provider: str
    model: str


@dataclass(frozen=True)
class Chunk:
    content: str
    index: int

    def to_stream_chunk(self) -> StreamChunk:
        return StreamChunk(content=self.content, index=self.index)


@dataclass(frozen=True)
class Completion:
    full_content: str
    stop_reason: str
    input_tokens: int
    output_tokens: int
    cost_usd: float
    latency_ms: int

    def to_response(self, model: str | None = None) -> ChatResponse:
        return ChatResponse(
            content=self.full_content,
            model=model,
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            cost_usd=self.cost_usd,
            latency_ms=self.latency_ms,
            stop_reason=self.stop_reason,
        )


@dataclass(frozen=True)
class ErrorEvent:
    code: str
    message: str
    retryable: bool = False


@dataclass(frozen=True)
class Aborted:
    reason: str = ""


@dataclass(frozen=True)
class UnknownFrame:
    kind: str
    message: str


StreamEvent = Union[SessionStarted, Chunk, Completion, ErrorEvent, Aborted, UnknownFrame]

TERMINAL_EVENTS = (Completion, ErrorEvent, Aborted)


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, TERMINAL_EVENTS)


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _float(value: Any) -> float:
    try:
        return float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0


def decode_frame(frame: Any) -> StreamEvent:
    """
    Classify one inbound response frame.

    Frames look like ``{"chunk": {"content": "He", "index": 0}}``. Anything
    that is not a mapping with exactly one known payload key becomes an
    ``UnknownFrame``; it is never raised and never terminal.
    """
    if not isinstance(frame, Mapping):
        return UnknownFrame(type(frame).__name__, f"Unrecognized frame: {type(frame).__name__}")

    present = [key for key, value in frame.items() if value is not None]
    if len(present) != 1:
        return UnknownFrame(",".join(sorted(present)), f"Unrecognized frame keys: {sorted(present)}")

    kind = present[0]
    payload = frame[kind]
    if not isinstance(payload, Mapping):
        return UnknownFrame(kind, f"Malformed {kind} payload")

    if kind == "sessionStarted":
        return SessionStarted(
            session_id=str(payload.get("sessionId", "")),
            provider=str(payload.get("provider", "")),
            model=str(payload.get("model", "")),
        )
    if kind == "chunk":
        return Chunk(content=str(payload.get("content", "")), index=_int(payload.get("index")))
    if kind == "completion":
        return Completion(
            full_content=str(payload.get("fullContent", "")),
            stop_reason=str(payload.get("stopReason", "")),
            input_tokens=_int(payload.get("inputTokens")),
            output_tokens=_int(payload.get("outputTokens")),
            cost_usd=_float(payload.get("costUsd")),
            latency_ms=_int(payload.get("latencyMs")),
        )
    if kind == "error":
        return ErrorEvent(
            code=str(payload.get("code") or "remote_error"),
            message=str(payload.get("message", "")),
            retryable=bool(payload.get("retryable", False)),
        )
    if kind == "aborted":
        return Aborted(reason=str(payload.get("reason", "")))

    logger.debug(f"Unknown frame kind {kind!r}")
    return UnknownFrame(kind, f"Unrecognized frame kind: {kind}")
