"""Serve command - run the WebSocket chat bridge."""

from typing import List, Optional

import typer
import uvicorn

from levee.cli._globals import get_global_config
from levee.cli.commands.chat import create_llm_client
from levee.cli.lib.safe_output import safe_print
from levee.streaming.ws import DEFAULT_PATH, create_app


def build_origin_check(allowed: Optional[List[str]]):
    """Exact-match origin allow-list; None allows every origin."""
    if not allowed:
        return None
    allowed_set = {origin.rstrip("/") for origin in allowed}
    return lambda origin: origin.rstrip("/") in allowed_set


def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8080, "--port", help="Port to listen on."),
    path: str = typer.Option(DEFAULT_PATH, "--path", help="WebSocket endpoint path."),
    allow_origin: Optional[List[str]] = typer.Option(
        None,
        "--allow-origin",
        help="Allowed Origin header (repeatable). Default: allow all.",
    ),
) -> None:
    """Serve the LLM chat WebSocket bridge."""
    config = get_global_config()
    llm = create_llm_client(config)
    app = create_app(llm, path=path, check_origin=build_origin_check(allow_origin))

    safe_print(f"Levee chat bridge on ws://{host}:{port}{path} -> {config.grpc_address}")
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())
