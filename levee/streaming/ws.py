"""
WebSocket bridge for LLM chat.

Each inbound WebSocket connection gets its own WSSession, which translates
``{"type": ..., "data": {...}}`` text frames into calls on a fresh chat
stream and forwards the stream's output back as frames.

Example:
    llm = LLMClient("lv_your_api_key")
    app = FastAPI()
    WebSocketHandler(llm, check_origin=lambda o: o == "https://myapp.com").attach(app)
"""

import asyncio
import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from levee.errors import LeveeError, ProtocolError, RemoteError, StreamAbortedError
from levee.schemas.chat import DEFAULT_MODEL, ChatInput, WireModel
from levee.schemas.ws import (
    WSAbortedResponse,
    WSAbortRequest,
    WSChunkResponse,
    WSCompletionResponse,
    WSErrorResponse,
    WSMessage,
    WSMessageType,
    WSStartedResponse,
    WSStartRequest,
    WSToolResult,
    WSUserMessage,
)
from levee.streaming.adapter import ChatStream
from levee.streaming.events import UNKNOWN_FRAME, UnknownFrame
from levee.streaming.llm import LLMClient

logger = logging.getLogger(__name__)

DEFAULT_PATH = "/ws/chat"
DEFAULT_PROVIDER = "anthropic"
POLICY_VIOLATION = 1008

OriginCheck = Callable[[str], bool]


class WSSession:
    """
    One WebSocket connection bridged to chat streams.

    States: idle (no stream) and active (one stream being forwarded). A
    finished stream returns the connection to idle; closing the connection
    aborts and releases any active stream.
    """

    def __init__(self, websocket: WebSocket, llm: LLMClient):
        self._ws = websocket
        self._llm = llm
        self._stream: Optional[ChatStream] = None
        self._forward_task: Optional[asyncio.Task] = None
        self._send_lock = asyncio.Lock()
        self._closed = False

    @property
    def active(self) -> bool:
        return self._stream is not None

    async def run(self) -> None:
        """Read frames until the client disconnects, then clean up."""
        try:
            while True:
                message = await self._ws.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info(f"WebSocket disconnected (code={message.get('code', 1000)})")
                    break
                raw = message.get("text")
                if raw is None:
                    try:
                        raw = (message.get("bytes") or b"").decode("utf-8")
                    except UnicodeDecodeError:
                        await self.send_error("invalid_json", "Binary frame is not valid UTF-8", False)
                        continue
                await self.handle_message(raw)
        except WebSocketDisconnect as e:
            logger.info(f"WebSocket disconnected (code={e.code})")
        finally:
            await self.cleanup()

    async def handle_message(self, raw: str) -> None:
        try:
            msg = WSMessage.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            await self.send_error("invalid_json", "Invalid JSON message", False)
            return

        handlers = {
            WSMessageType.START.value: self.handle_start,
            WSMessageType.MESSAGE.value: self.handle_user_message,
            WSMessageType.ABORT.value: self.handle_abort,
            WSMessageType.TOOL_RESULT.value: self.handle_tool_result,
        }
        handler = handlers.get(msg.type)
        if handler is None:
            await self.send_error("unknown_type", f"Unknown message type: {msg.type}", False)
            return
        await handler(msg.data or {})

    async def handle_start(self, data: dict[str, Any]) -> None:
        if self.active:
            await self.send_error("already_started", "Session already started", False)
            return

        try:
            req = WSStartRequest.model_validate(data)
        except ValidationError as e:
            await self.send_error("invalid_payload", f"Invalid start request: {e.errors()[0]['msg']}", False)
            return

        chat_input = ChatInput(
            messages=tuple(req.messages or ()),
            system_prompt=req.system_prompt,
            model=req.model,
            max_tokens=req.max_tokens,
            temperature=req.temperature,
        )
        stream = self._llm.chat_stream(chat_input)
        stream.on_unknown_frame = self._report_unknown_frame
        self._stream = stream
        try:
            await stream.start()
        except LeveeError as e:
            self._stream = None
            await stream.aclose()
            await self.send_error("start_failed", e.message, True)
            return

        # The transport only reports a session id with its first frame.
        await self.send(
            WSMessageType.STARTED,
            WSStartedResponse(
                session_id=str(uuid.uuid4()),
                provider=DEFAULT_PROVIDER,
                model=req.model or DEFAULT_MODEL,
            ),
        )
        self._forward_task = asyncio.create_task(self._forward(stream), name="levee-ws-forward")

    async def _forward(self, stream: ChatStream) -> None:
        try:
            async for chunk in stream:
                await self.send(WSMessageType.CHUNK, WSChunkResponse(content=chunk.content, index=chunk.index))
            response = stream.response
            await self.send(
                WSMessageType.COMPLETION,
                WSCompletionResponse(
                    full_content=response.content,
                    stop_reason=response.stop_reason,
                    input_tokens=response.input_tokens,
                    output_tokens=response.output_tokens,
                    cost_usd=response.cost_usd,
                    latency_ms=response.latency_ms,
                ),
            )
        except StreamAbortedError as e:
            await self.send(WSMessageType.ABORTED, WSAbortedResponse(reason=e.reason))
        except RemoteError as e:
            await self.send_error(e.code, e.message, e.retryable)
        except ProtocolError as e:
            await self.send_error("stream_error", e.message, False)
        finally:
            if self._stream is stream:
                self._stream = None
                self._forward_task = None

    async def _report_unknown_frame(self, frame: UnknownFrame) -> None:
        # Non-terminal: the stream stays active and its chunks keep flowing.
        await self.send_error(UNKNOWN_FRAME, frame.message, False)

    async def handle_user_message(self, data: dict[str, Any]) -> None:
        if not self.active:
            await self.send_error("not_started", "Session not started", False)
            return
        try:
            WSUserMessage.model_validate(data)
        except ValidationError:
            await self.send_error("invalid_payload", "Invalid message payload", False)
            return
        await self.send_error("not_implemented", "Multi-turn streaming is not supported yet", False)

    async def handle_abort(self, data: dict[str, Any]) -> None:
        if not self.active:
            return
        try:
            reason = WSAbortRequest.model_validate(data).reason
        except ValidationError:
            reason = None
        self._stream.abort(reason)

    async def handle_tool_result(self, data: dict[str, Any]) -> None:
        if not self.active:
            await self.send_error("not_started", "Session not started", False)
            return
        try:
            WSToolResult.model_validate(data)
        except ValidationError:
            await self.send_error("invalid_payload", "Invalid tool_result payload", False)
            return
        await self.send_error("not_implemented", "Tool results are not supported yet", False)

    async def send(self, msg_type: WSMessageType, data: WireModel) -> None:
        if self._closed or self._ws.client_state != WebSocketState.CONNECTED:
            return
        payload = json.dumps({"type": msg_type.value, "data": data.to_wire()}, ensure_ascii=False)
        async with self._send_lock:
            try:
                await self._ws.send_text(payload)
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.warning(f"WebSocket send failed: {e}")

    async def send_error(self, code: str, message: str, retryable: bool) -> None:
        await self.send(WSMessageType.ERROR, WSErrorResponse(code=code, message=message, retryable=retryable))

    async def cleanup(self) -> None:
        """Abort and release any active stream; no frames are sent afterwards."""
        if self._closed:
            return
        self._closed = True

        stream, task = self._stream, self._forward_task
        self._stream = None
        self._forward_task = None
        if stream is not None:
            stream.abort("connection closed")
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if stream is not None:
            await stream.aclose()
            logger.info("Aborted active chat stream on disconnect")


class WebSocketHandler:
    """
    WebSocket handler for LLM chat that bridges WebSocket to gRPC.

    Args:
        llm: Client used to open one chat stream per connection
        check_origin: Optional predicate; connections whose Origin header
            fails it are rejected before the handshake completes
    """

    def __init__(self, llm: LLMClient, check_origin: Optional[OriginCheck] = None):
        self.llm = llm
        self.check_origin = check_origin

    def is_origin_allowed(self, origin: str) -> bool:
        if self.check_origin is None:
            return True
        return bool(self.check_origin(origin))

    async def handle_connection(self, websocket: WebSocket) -> None:
        origin = websocket.headers.get("origin", "")
        if not self.is_origin_allowed(origin):
            logger.warning(f"Rejected WebSocket connection from origin {origin!r}")
            await websocket.close(code=POLICY_VIOLATION)
            return

        await websocket.accept()
        logger.info(f"WebSocket connected (origin={origin or '-'})")
        await WSSession(websocket, self.llm).run()

    def attach(self, app: FastAPI, path: str = DEFAULT_PATH) -> None:
        """Mount the handler on a FastAPI app at ``path``."""

        async def chat_websocket(websocket: WebSocket) -> None:
            await self.handle_connection(websocket)

        app.add_api_websocket_route(path, chat_websocket)


def create_websocket_handler(llm: LLMClient, check_origin: Optional[OriginCheck] = None) -> WebSocketHandler:
    return WebSocketHandler(llm, check_origin=check_origin)


def create_app(
    llm: LLMClient,
    path: str = DEFAULT_PATH,
    check_origin: Optional[OriginCheck] = None,
) -> FastAPI:
    """Standalone FastAPI app serving the chat bridge; closes ``llm`` on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await llm.close()

    app = FastAPI(title="Levee Chat Bridge", lifespan=lifespan)
    create_websocket_handler(llm, check_origin).attach(app, path)
    return app
