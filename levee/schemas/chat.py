from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ChatRole = Literal["user", "assistant", "system"]
ChatModel = Literal["fast", "balanced", "powerful"]

DEFAULT_MODEL: ChatModel = "balanced"


class WireModel(BaseModel):
    """Snake_case in Python, camelCase on the duplex and WebSocket wires."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ChatMessage(WireModel):
    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str


class ChatInput(WireModel):
    model_config = ConfigDict(frozen=True)

    messages: tuple[ChatMessage, ...] = ()
    system_prompt: str | None = None
    model: ChatModel | None = None
    max_tokens: int | None = Field(default=None, gt=0)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)


class StreamChunk(WireModel):
    content: str
    index: int


class ChatResponse(WireModel):
    content: str
    model: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0
    latency_ms: int = 0
    stop_reason: str = ""


class LLMConfig(BaseModel):
    provider: str
    models: list[str] = Field(default_factory=list)
    default_model: str | None = None
