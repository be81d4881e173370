"""Chat command - one prompt, streamed to the terminal."""

import asyncio
import json
from typing import Optional

import typer

from levee.cli._globals import get_global_config
from levee.cli.lib.chat_renderer import ChatRenderer
from levee.cli.lib.safe_output import safe_print
from levee.core.config import LeveeConfig
from levee.errors import LeveeError, StreamAbortedError
from levee.schemas.chat import ChatInput, ChatResponse
from levee.streaming.llm import LLMClient


def create_llm_client(config: LeveeConfig) -> LLMClient:
    return LLMClient(
        api_key=config.api_key,
        grpc_address=config.grpc_address,
        timeout=config.timeout,
        insecure=config.grpc_insecure,
    )


async def run_chat(
    llm: LLMClient,
    chat_input: ChatInput,
    renderer: ChatRenderer,
    stream: bool = True,
) -> ChatResponse:
    """Run one chat turn, rendering chunks as they arrive when streaming."""
    try:
        if not stream:
            return await llm.chat(chat_input)
        return await llm.chat_stream_callback(chat_input, lambda chunk: renderer.render_token(chunk.content))
    finally:
        await llm.close()


def chat(
    prompt: str = typer.Argument(..., help="User message to send."),
    system: Optional[str] = typer.Option(None, "--system", "-s", help="System prompt."),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model tier: fast | balanced | powerful."),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Maximum output tokens."),
    temperature: Optional[float] = typer.Option(None, "--temperature", help="Sampling temperature."),
    no_stream: bool = typer.Option(False, "--no-stream", help="Wait for the full response instead of streaming."),
    json_output: bool = typer.Option(False, "--json", help="Print the final response as JSON."),
) -> None:
    """Send a prompt to the Levee LLM service."""
    config = get_global_config()
    renderer = ChatRenderer()

    try:
        chat_input = ChatInput(
            messages=({"role": "user", "content": prompt},),
            system_prompt=system,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except ValueError as e:
        renderer.render_error(f"Invalid chat options: {e}")
        raise typer.Exit(code=2)

    streamed = not no_stream and not json_output
    try:
        llm = create_llm_client(config)
        response = asyncio.run(run_chat(llm, chat_input, renderer, stream=streamed))
    except ValueError as e:
        renderer.render_error(str(e))
        raise typer.Exit(code=1)
    except StreamAbortedError as e:
        renderer.render_aborted(e.reason)
        raise typer.Exit(code=1)
    except LeveeError as e:
        renderer.render_error(e.user_friendly_message())
        raise typer.Exit(code=1)

    if json_output:
        safe_print(json.dumps(response.model_dump(), ensure_ascii=False, indent=2))
        return
    renderer.render_completion(response, streamed=streamed)
