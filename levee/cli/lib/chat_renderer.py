"""Renderer for streamed chat output in the terminal."""

from __future__ import annotations

from levee.cli.lib.safe_output import emoji, safe_print
from levee.schemas.chat import ChatResponse


class ChatRenderer:
    """Render chunks inline, then a usage footer or an error block."""

    def render_token(self, content: str) -> None:
        """Render incremental content without newline."""
        safe_print(content, end="", flush=True)

    def render_completion(self, response: ChatResponse, streamed: bool = True) -> None:
        if not streamed:
            safe_print(response.content)
        else:
            safe_print("")
        safe_print("-" * 60)
        safe_print(
            f"{emoji('✅', '[DONE]')} {response.stop_reason or 'done'} | "
            f"model={response.model or '-'} | "
            f"tokens in/out={response.input_tokens}/{response.output_tokens} | "
            f"cost=${response.cost_usd:.4f} | {response.latency_ms}ms"
        )

    def render_aborted(self, reason: str) -> None:
        safe_print(f"\n{emoji('⏹️', '[ABORTED]')} Generation aborted: {reason or '-'}")

    def render_error(self, error_msg: str) -> None:
        """Render error block."""
        safe_print(f"\n{emoji('❌', '[ERROR]')} {error_msg}", err=True)
