"""
LLM chat client over the duplex gRPC service.

Example:
    async with LLMClient("lv_your_api_key") as llm:
        async with llm.chat_stream({"messages": [{"role": "user", "content": "Hi"}]}) as stream:
            async for chunk in stream:
                print(chunk.content, end="")
        print(stream.response.output_tokens)

        response = await llm.chat({"messages": [{"role": "user", "content": "Hello!"}]})
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from levee.core.config import get_config
from levee.errors import ProtocolError
from levee.schemas.chat import ChatInput, ChatResponse, StreamChunk
from levee.streaming.adapter import ChatStream
from levee.streaming.events import Completion, decode_frame
from levee.streaming.session import DuplexSession
from levee.streaming.transport import GrpcTransport

logger = logging.getLogger(__name__)

ChatInputLike = Union[ChatInput, Mapping[str, Any]]
StreamCallback = Callable[[StreamChunk], Union[None, Awaitable[None]]]


def coerce_chat_input(chat_input: ChatInputLike) -> ChatInput:
    if isinstance(chat_input, ChatInput):
        return chat_input
    return ChatInput.model_validate(chat_input)


class LLMClient:
    """
    Streaming and non-streaming chat against the Levee LLM service.

    One gRPC channel is held per client; it is opened on first use and
    released by ``close()``. Every ``chat_stream`` call gets its own session.

    Args:
        api_key: Levee API key (falls back to LEVEE_API_KEY)
        grpc_address: ``host:port`` override (falls back to LEVEE_GRPC_ADDRESS)
        timeout: Deadline in seconds for ``chat()``; streaming has none
        insecure: Plaintext channel for local development
        transport: Pre-built transport (anything with ``open_chat``,
            ``simple_chat`` and ``close``)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        grpc_address: Optional[str] = None,
        timeout: Optional[float] = None,
        insecure: Optional[bool] = None,
        codec: Optional[Any] = None,
        transport: Optional[Any] = None,
    ):
        config = get_config(
            api_key=api_key,
            timeout=timeout,
            grpc_address=grpc_address,
            grpc_insecure=insecure,
        )
        if not config.api_key:
            raise ValueError("API key is required")

        self.api_key = config.api_key
        self.grpc_address = config.grpc_address
        self.timeout = config.timeout
        self._transport = transport or GrpcTransport(
            config.grpc_address,
            insecure=config.grpc_insecure,
            codec=codec,
        )

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def new_session(self) -> DuplexSession:
        """Create an unstarted session on this client's transport."""
        return DuplexSession(self._transport, self.api_key)

    def chat_stream(self, chat_input: ChatInputLike) -> ChatStream:
        """
        Streaming chat. Returns a lazy ``ChatStream``; the session starts on
        the first pull.
        """
        return ChatStream(self.new_session(), coerce_chat_input(chat_input))

    async def chat_stream_callback(
        self, chat_input: ChatInputLike, on_chunk: StreamCallback
    ) -> ChatResponse:
        """
        Streaming chat that forwards each chunk to ``on_chunk`` (sync or
        async) and returns the final response. The stream is consumed once.
        """
        async with self.chat_stream(chat_input) as stream:
            async for chunk in stream:
                result = on_chunk(chunk)
                if inspect.isawaitable(result):
                    await result
        return stream.response

    async def chat(self, chat_input: ChatInputLike) -> ChatResponse:
        """
        Simple (non-streaming) chat, bounded by ``timeout``.

        Raises:
            TimeoutError: Deadline exceeded
            ConnectionError: Service unreachable
            RemoteError: The service rejected the request
        """
        chat_input = coerce_chat_input(chat_input)
        request = chat_input.to_wire()
        request["messages"] = [m.to_wire() for m in chat_input.messages]
        request["apiKey"] = self.api_key

        logger.debug(f"SimpleChat to {self.grpc_address} ({len(chat_input.messages)} messages)")
        reply = await self._transport.simple_chat(request, timeout=self.timeout)

        event = decode_frame({"completion": reply})
        if not isinstance(event, Completion):
            raise ProtocolError(f"Unrecognized SimpleChat response: {event}")
        return event.to_response(model=chat_input.model)

    async def close(self) -> None:
        """Release the gRPC channel. Safe to call more than once."""
        await self._transport.close()
