from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from levee.schemas.chat import ChatMessage, ChatModel, WireModel


class WSMessageType(str, Enum):
    START = "start"
    MESSAGE = "message"
    ABORT = "abort"
    TOOL_RESULT = "tool_result"
    STARTED = "started"
    CHUNK = "chunk"
    COMPLETION = "completion"
    ERROR = "error"
    ABORTED = "aborted"
    # Reserved: the bridge does not forward tool calls yet.
    TOOL_CALL = "tool_call"


class WSMessage(BaseModel):
    """Envelope for every frame: ``{"type": ..., "data": {...}}``."""

    type: str
    data: dict[str, Any] | None = None


# Inbound


class WSStartRequest(WireModel):
    system_prompt: str | None = None
    model: ChatModel | None = None
    max_tokens: int | None = Field(default=None, gt=0)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    messages: list[ChatMessage] | None = None


class WSUserMessage(WireModel):
    content: str


class WSAbortRequest(WireModel):
    reason: str | None = None


class WSToolResult(WireModel):
    tool_call_id: str
    result: str
    is_error: bool = False


# Outbound


class WSStartedResponse(WireModel):
    session_id: str
    provider: str
    model: str


class WSChunkResponse(WireModel):
    content: str
    index: int


class WSCompletionResponse(WireModel):
    full_content: str
    stop_reason: str
    input_tokens: int
    output_tokens: int
    cost_usd: float
    latency_ms: int


class WSErrorResponse(WireModel):
    code: str
    message: str
    retryable: bool


class WSAbortedResponse(WireModel):
    reason: str = ""
