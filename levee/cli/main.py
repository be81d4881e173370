"""
Levee CLI Main Entry Point

Streams LLM chat from the terminal and serves the WebSocket chat bridge.
"""

import sys
from typing import Optional

import typer

from levee.core.env_loader import load_project_env

# Load .env before reading any LEVEE_* variables
load_project_env()

from levee.cli._globals import set_global_config
from levee.cli.commands import chat, serve
from levee.core.config import get_config
from levee.core.logging import setup_logging


def config_callback(
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        help="Levee API key. Overrides LEVEE_API_KEY env var.",
        envvar="LEVEE_API_KEY",
    ),
    grpc_address: Optional[str] = typer.Option(
        None,
        "--grpc-address",
        help="LLM service host:port. Overrides LEVEE_GRPC_ADDRESS env var.",
        envvar="LEVEE_GRPC_ADDRESS",
    ),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Use a plaintext gRPC channel (local development only).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Timeout in seconds for non-streaming calls. Overrides LEVEE_TIMEOUT env var.",
        envvar="LEVEE_TIMEOUT",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR). Overrides LEVEE_LOG_LEVEL env var.",
    ),
) -> None:
    """Global options callback. Sets configuration for all commands."""
    config = get_config(
        api_key=api_key,
        grpc_address=grpc_address,
        grpc_insecure=True if insecure else None,
        timeout=timeout,
        log_level=log_level,
    )
    setup_logging(config.log_level)
    set_global_config(config)


app = typer.Typer(
    name="levee",
    help="Levee: streaming LLM chat and WebSocket bridge",
    no_args_is_help=True,
    callback=config_callback,
)

app.command()(chat.chat)
app.command()(serve.serve)


def main() -> None:
    """Main entry point for CLI."""
    try:
        app()
    except KeyboardInterrupt:
        print("\n[ABORTED] Aborted by user.", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"\n[ERROR] Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
