"""Serve the HTTP API with uvicorn."""

import typer
import uvicorn

from timemaster.interfaces.cli.common import CliState, get_commands, print_info


def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
) -> None:
    """Run the task API for the desktop front end."""
    from timemaster.interfaces.api import create_app

    state: CliState = ctx.obj
    app = create_app(get_commands(ctx))
    print_info(f"Serving tasks from {state.settings.data_dir} ({state.settings.backend.value})")
    uvicorn.run(app, host=host, port=port, log_level=state.settings.log_level.lower())
