"""Levee SDK: REST resources plus streaming LLM chat over gRPC and WebSocket."""

import logging

from levee.client import Levee
from levee.errors import (
    APIError,
    AuthenticationError,
    BadRequestError,
    ConnectionError,
    InternalServerError,
    JSONParseError,
    LeveeError,
    NotFoundError,
    PermissionDeniedError,
    ProtocolError,
    RateLimitError,
    RemoteError,
    StreamAbortedError,
    TimeoutError,
)
from levee.schemas.chat import ChatInput, ChatMessage, ChatResponse, StreamChunk
from levee.streaming import ChatStream, LLMClient, WebSocketHandler, create_websocket_handler

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "AuthenticationError",
    "BadRequestError",
    "ChatInput",
    "ChatMessage",
    "ChatResponse",
    "ChatStream",
    "ConnectionError",
    "InternalServerError",
    "JSONParseError",
    "LLMClient",
    "Levee",
    "LeveeError",
    "NotFoundError",
    "PermissionDeniedError",
    "ProtocolError",
    "RateLimitError",
    "RemoteError",
    "StreamAbortedError",
    "StreamChunk",
    "TimeoutError",
    "WebSocketHandler",
    "create_websocket_handler",
]
