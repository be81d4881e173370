"""Streaming LLM chat: duplex sessions, pull adapter and WebSocket bridge."""

from levee.streaming.adapter import ChatStream
from levee.streaming.llm import LLMClient
from levee.streaming.session import DuplexSession, SessionState
from levee.streaming.ws import WebSocketHandler, create_app, create_websocket_handler

__all__ = [
    "ChatStream",
    "DuplexSession",
    "LLMClient",
    "SessionState",
    "WebSocketHandler",
    "create_app",
    "create_websocket_handler",
]
