"""CLI interface for timemaster using Typer.

Usage:
    timemaster add "Read a book" --target 10     # Create a task
    timemaster list --status active              # Show open tasks
    timemaster progress <id>                     # Record one step
    timemaster serve                             # Run the HTTP API

The CLI is structured as:
- app: Main Typer application
- commands/: Individual command groups (task, server)
- common.py: Shared utilities for CLI commands
- main.py: Entry point that runs the app
"""

from pathlib import Path
from typing import Optional

import typer

from timemaster import __version__
from timemaster.global_config import StoreBackend, get_settings
from timemaster.interfaces.cli.commands import server, task
from timemaster.interfaces.cli.common import CliState
from timemaster.logging_setup import setup_logging

# Create the main Typer application
app = typer.Typer(
    name="timemaster",
    help="Personal task tracking with once, cycle and long-term tasks",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"timemaster version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    backend: Optional[StoreBackend] = typer.Option(
        None,
        "--backend",
        "-b",
        help="Task store: memory, json or sqlite (or set TIMEMASTER_BACKEND)",
        envvar="TIMEMASTER_BACKEND",
    ),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        help="Directory holding the task store (or set TIMEMASTER_DATA_DIR)",
        envvar="TIMEMASTER_DATA_DIR",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr"),
) -> None:
    """timemaster - track one-off, recurring and long-term tasks."""
    updates: dict = {}
    if backend is not None:
        updates["backend"] = backend
    if data_dir is not None:
        updates["data_dir"] = data_dir.expanduser()
    if verbose:
        updates["log_level"] = "DEBUG"
    settings = get_settings().model_copy(update=updates)

    setup_logging(settings.log_level)
    state = CliState(settings=settings)
    ctx.obj = state
    ctx.call_on_close(state.close)


# =============================================================================
# Register Command Groups
# =============================================================================

app.add_typer(task.app, name="task")
app.command("serve")(server.serve)


# =============================================================================
# Top-Level Shortcuts for Common Commands
# =============================================================================

app.command("list", help="List tasks (shortcut for 'task list').")(task.list_tasks)
app.command("add", help="Create a task (shortcut for 'task add').")(task.add)
app.command("edit", help="Edit a task (shortcut for 'task edit').")(task.edit)
app.command("progress", help="Record progress (shortcut for 'task progress').")(task.progress)
app.command("archive", help="Archive a task (shortcut for 'task archive').")(task.archive)
app.command("reopen", help="Reopen a task (shortcut for 'task reopen').")(task.reopen)
app.command("delete", help="Delete a task (shortcut for 'task delete').")(task.delete)
app.command("stats", help="Show stats (shortcut for 'task stats').")(task.stats)
app.command("seed", help="Create sample tasks (shortcut for 'task seed').")(task.seed)
