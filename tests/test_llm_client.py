"""
Tests for LLMClient (streaming and simple chat) and the gRPC transport
helpers that do not need a live server.
"""

import grpc
import pytest

from fakes import FakeTransport, chunk, completion, error
from levee.errors import ConnectionError, ProtocolError, RemoteError, TimeoutError
from levee.schemas.chat import ChatInput
from levee.streaming.llm import LLMClient, coerce_chat_input
from levee.streaming.transport import DEFAULT_GRPC_ADDRESS, GrpcTransport, JsonCodec, map_rpc_error

HI = {"messages": [{"role": "user", "content": "Hi"}]}


def rpc_error(code: grpc.StatusCode, details: str = "") -> grpc.aio.AioRpcError:
    return grpc.aio.AioRpcError(code, grpc.aio.Metadata(), grpc.aio.Metadata(), details=details)


class TestClientConfiguration:
    """LLMClient construction and config resolution."""

    def test_api_key_required(self, monkeypatch) -> None:
        """A missing API key raises."""
        monkeypatch.delenv("LEVEE_API_KEY", raising=False)
        with pytest.raises(ValueError, match="API key is required"):
            LLMClient()

    def test_api_key_from_env(self, monkeypatch) -> None:
        """The API key falls back to LEVEE_API_KEY."""
        monkeypatch.setenv("LEVEE_API_KEY", "lv_env")
        client = LLMClient(transport=FakeTransport())
        assert client.api_key == "lv_env"

    def test_defaults(self, monkeypatch) -> None:
        """Address and timeout defaults."""
        monkeypatch.delenv("LEVEE_GRPC_ADDRESS", raising=False)
        monkeypatch.delenv("LEVEE_TIMEOUT", raising=False)
        client = LLMClient(api_key="lv_test")
        assert client.grpc_address == DEFAULT_GRPC_ADDRESS
        assert client.timeout == 30.0

    def test_channel_is_lazy(self) -> None:
        """No channel is opened at construction."""
        transport = GrpcTransport("localhost:50051", insecure=True)
        LLMClient(api_key="lv_test", transport=transport)
        assert transport.is_open is False

    def test_empty_address_rejected(self) -> None:
        """An empty gRPC address is rejected."""
        with pytest.raises(ConnectionError):
            GrpcTransport("")

    def test_coerce_chat_input(self) -> None:
        """Plain dicts are accepted as chat input."""
        chat_input = coerce_chat_input({"messages": [{"role": "user", "content": "x"}], "maxTokens": 64})
        assert isinstance(chat_input, ChatInput)
        assert chat_input.max_tokens == 64
        assert coerce_chat_input(chat_input) is chat_input


@pytest.mark.asyncio
class TestStreamingChat:
    """chat_stream and chat_stream_callback."""

    async def test_each_stream_opens_its_own_call(self) -> None:
        """Every stream gets its own call."""
        transport = FakeTransport(script=[chunk("a", 0), completion("a")])
        client = LLMClient(api_key="lv_test", transport=transport)

        for _ in range(2):
            async with client.chat_stream(HI) as stream:
                assert [c.content async for c in stream] == ["a"]

        assert len(transport.calls) == 2
        assert transport.calls[0].written[0]["start"]["apiKey"] == "lv_test"

    async def test_callback_sees_every_chunk_once(self) -> None:
        """The callback sees each chunk exactly once."""
        transport = FakeTransport(script=[chunk("He", 0), chunk("llo", 1), completion("Hello")])
        client = LLMClient(api_key="lv_test", transport=transport)
        seen = []

        response = await client.chat_stream_callback(HI, lambda c: seen.append(c.content))

        assert seen == ["He", "llo"]
        assert response.content == "Hello"
        assert len(transport.calls) == 1

    async def test_async_callback(self) -> None:
        """Async callbacks are awaited."""
        transport = FakeTransport(script=[chunk("a", 0), completion("a")])
        client = LLMClient(api_key="lv_test", transport=transport)
        seen = []

        async def on_chunk(c) -> None:
            seen.append(c.index)

        await client.chat_stream_callback(HI, on_chunk)
        assert seen == [0]

    async def test_callback_remote_error(self) -> None:
        """A remote error propagates from the callback wrapper."""
        transport = FakeTransport(script=[error("overloaded", "busy", retryable=True)])
        client = LLMClient(api_key="lv_test", transport=transport)

        with pytest.raises(RemoteError) as exc_info:
            await client.chat_stream_callback(HI, lambda c: None)

        assert exc_info.value.code == "overloaded"
        assert transport.call.cancelled is True

    async def test_close_releases_transport(self) -> None:
        """close() closes the transport."""
        transport = FakeTransport()
        async with LLMClient(api_key="lv_test", transport=transport):
            pass
        assert transport.close_count == 1


@pytest.mark.asyncio
class TestSimpleChat:
    """Unary chat."""

    async def test_chat_returns_response(self) -> None:
        """The unary reply becomes a ChatResponse."""
        reply = completion("Hello there", inputTokens=4, outputTokens=3)["completion"]
        transport = FakeTransport(simple_reply=reply)
        client = LLMClient(api_key="lv_test", timeout=12.0, transport=transport)

        response = await client.chat({**HI, "model": "powerful", "temperature": 0.2})

        request, timeout = transport.simple_requests[0]
        assert timeout == 12.0
        assert request["apiKey"] == "lv_test"
        assert request["model"] == "powerful"
        assert request["temperature"] == 0.2
        assert response.content == "Hello there"
        assert response.output_tokens == 3
        assert response.model == "powerful"

    async def test_chat_timeout(self) -> None:
        """A deadline becomes TimeoutError."""
        transport = FakeTransport(simple_error=TimeoutError("SimpleChat timed out"))
        client = LLMClient(api_key="lv_test", transport=transport)

        with pytest.raises(TimeoutError):
            await client.chat(HI)

    async def test_chat_malformed_reply(self) -> None:
        """A reply that is not a mapping raises ProtocolError."""
        client = LLMClient(api_key="lv_test", transport=FakeTransport(simple_reply="nope"))
        with pytest.raises(ProtocolError):
            await client.chat(HI)


class TestRpcErrorMapping:
    """gRPC status to SDK error mapping."""

    def test_deadline_exceeded(self) -> None:
        """DEADLINE_EXCEEDED maps to TimeoutError."""
        assert isinstance(map_rpc_error(rpc_error(grpc.StatusCode.DEADLINE_EXCEEDED), "SimpleChat"), TimeoutError)

    @pytest.mark.parametrize("code", [grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.UNAUTHENTICATED])
    def test_connection_failures(self, code) -> None:
        """UNAVAILABLE and UNAUTHENTICATED map to ConnectionError."""
        assert isinstance(map_rpc_error(rpc_error(code, "down"), "Chat"), ConnectionError)

    def test_resource_exhausted_is_retryable(self) -> None:
        """RESOURCE_EXHAUSTED is a retryable RemoteError."""
        err = map_rpc_error(rpc_error(grpc.StatusCode.RESOURCE_EXHAUSTED, "quota"), "Chat")
        assert isinstance(err, RemoteError)
        assert err.code == "resource_exhausted"
        assert err.message == "quota"
        assert err.retryable is True

    def test_invalid_argument_not_retryable(self) -> None:
        """INVALID_ARGUMENT is not retryable."""
        err = map_rpc_error(rpc_error(grpc.StatusCode.INVALID_ARGUMENT, "bad"), "Chat")
        assert err.retryable is False
        assert str(err) == "invalid_argument: bad"


class TestJsonCodec:
    """JSON serializer pair for gRPC."""

    def test_encode_compact_utf8(self) -> None:
        """Encoding is compact UTF-8."""
        assert JsonCodec().encode({"chunk": {"content": "é"}}) == '{"chunk":{"content":"é"}}'.encode("utf-8")

    def test_decode(self) -> None:
        """Decoding returns the mapping."""
        assert JsonCodec().decode(b'{"aborted":{}}') == {"aborted": {}}

    def test_decode_garbage_returns_bytes(self) -> None:
        """Undecodable payloads come back as bytes."""
        assert JsonCodec().decode(b"\xff\xfe") == b"\xff\xfe"
