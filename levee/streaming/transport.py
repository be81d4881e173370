"""
gRPC duplex transport for the LLM chat service.

Messages travel as JSON objects with camelCase keys. The codec is pluggable so
generated protobuf stubs can be swapped in without touching the session code.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import grpc

from levee.errors import ConnectionError, RemoteError, TimeoutError

logger = logging.getLogger(__name__)

DEFAULT_GRPC_ADDRESS = "llm.levee.com:9889"
CHAT_METHOD = "/llm.LLMService/Chat"
SIMPLE_CHAT_METHOD = "/llm.LLMService/SimpleChat"

_RETRYABLE_CODES = {
    grpc.StatusCode.UNAVAILABLE,
    grpc.StatusCode.RESOURCE_EXHAUSTED,
    grpc.StatusCode.ABORTED,
}


class JsonCodec:
    """Serializer pair handed to grpc for request/response messages."""

    def encode(self, message: dict) -> bytes:
        return json.dumps(message, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            # Returned as-is; the frame decoder reports it as an unknown frame.
            logger.warning(f"Undecodable frame ({len(data)} bytes): {e}")
            return data


def map_rpc_error(error: grpc.aio.AioRpcError, during: str) -> Exception:
    """Translate a grpc status into the SDK error taxonomy."""
    code = error.code()
    details = error.details() or code.name
    if code == grpc.StatusCode.DEADLINE_EXCEEDED:
        return TimeoutError(f"{during} timed out: {details}")
    if code in (grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.UNAUTHENTICATED):
        return ConnectionError(f"{during} failed: {details}")
    return RemoteError(code.name.lower(), details, retryable=code in _RETRYABLE_CODES)


class GrpcChatCall:
    """One bidirectional ``Chat`` call."""

    def __init__(self, call: grpc.aio.StreamStreamCall):
        self._call = call

    async def write(self, frame: dict) -> None:
        try:
            await self._call.write(frame)
        except grpc.aio.AioRpcError as e:
            raise map_rpc_error(e, "Chat stream write") from e

    async def read(self) -> Optional[Any]:
        """Return the next response frame, or None once the server is done."""
        try:
            frame = await self._call.read()
        except grpc.aio.AioRpcError as e:
            if e.code() == grpc.StatusCode.CANCELLED:
                return None
            raise map_rpc_error(e, "Chat stream read") from e
        if frame is grpc.aio.EOF:
            return None
        return frame

    def cancel(self) -> None:
        self._call.cancel()


class GrpcTransport:
    """
    Lazily-created gRPC channel shared by every call of one client.

    Args:
        address: ``host:port`` of the LLM service
        insecure: Use a plaintext channel (local development only)
        codec: Object with ``encode``/``decode`` methods
        credentials: Explicit channel credentials (defaults to system TLS roots)
    """

    def __init__(
        self,
        address: str = DEFAULT_GRPC_ADDRESS,
        insecure: bool = False,
        codec: Optional[Any] = None,
        credentials: Optional[grpc.ChannelCredentials] = None,
    ):
        if not address:
            raise ConnectionError("gRPC address is required")
        self.address = address
        self.insecure = insecure
        self.codec = codec or JsonCodec()
        self._credentials = credentials
        self._channel: Optional[grpc.aio.Channel] = None

    @property
    def is_open(self) -> bool:
        return self._channel is not None

    def _get_channel(self) -> grpc.aio.Channel:
        if self._channel is not None:
            return self._channel
        logger.debug(f"Opening gRPC channel to {self.address} (insecure={self.insecure})")
        try:
            if self.insecure:
                self._channel = grpc.aio.insecure_channel(self.address)
            else:
                credentials = self._credentials or grpc.ssl_channel_credentials()
                self._channel = grpc.aio.secure_channel(self.address, credentials)
        except (ValueError, RuntimeError) as e:
            raise ConnectionError(f"Cannot create channel to {self.address}: {e}") from e
        return self._channel

    def _method(self, name: str, kind: str) -> Callable:
        channel = self._get_channel()
        factory = getattr(channel, kind)
        return factory(
            name,
            request_serializer=self.codec.encode,
            response_deserializer=self.codec.decode,
        )

    async def open_chat(self) -> GrpcChatCall:
        """Open a new bidirectional ``Chat`` call on the shared channel."""
        chat = self._method(CHAT_METHOD, "stream_stream")
        return GrpcChatCall(chat())

    async def simple_chat(self, request: dict, timeout: Optional[float]) -> Any:
        """Unary ``SimpleChat``; returns the decoded completion message."""
        simple_chat = self._method(SIMPLE_CHAT_METHOD, "unary_unary")
        try:
            return await simple_chat(request, timeout=timeout)
        except grpc.aio.AioRpcError as e:
            raise map_rpc_error(e, "SimpleChat") from e

    async def close(self) -> None:
        if self._channel is None:
            return
        channel, self._channel = self._channel, None
        await channel.close()
        logger.debug(f"Closed gRPC channel to {self.address}")
