"""Shared utilities for timemaster CLI commands.

This module provides common utilities used across CLI commands:
- Resolving the settings and command surface for an invocation
- Formatted output helpers (error, success, info)
- Task formatting for display
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Optional

import typer

from timemaster.domain.task import Task, TaskKind, TaskStatus, TaskError
from timemaster.global_config import Settings
from timemaster.interfaces.commands import TaskCommands

STATUS_MARKERS = {
    TaskStatus.ACTIVE: "[ ]",
    TaskStatus.COMPLETED: "[x]",
    TaskStatus.ARCHIVED: "[-]",
}


@dataclass
class CliState:
    """Per-invocation state stored on the Typer context."""

    settings: Settings
    _commands: Optional[TaskCommands] = field(default=None, repr=False)

    @property
    def commands(self) -> TaskCommands:
        if self._commands is None:
            self._commands = TaskCommands.from_settings(self.settings)
        return self._commands

    def close(self) -> None:
        if self._commands is not None:
            self._commands.engine.repository.close()


def get_commands(ctx: typer.Context) -> TaskCommands:
    """Get the command surface for this invocation.

    Raises:
        typer.Exit: If the store cannot be opened.
    """
    state: CliState = ctx.obj
    with task_errors():
        return state.commands


@contextmanager
def task_errors() -> Iterator[None]:
    """Print a typed task error in red and exit with status 1."""
    try:
        yield
    except TaskError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


def print_error(msg: str) -> None:
    """Print a formatted error message.

    Args:
        msg: Error message to display
    """
    typer.echo(typer.style(f"Error: {msg}", fg=typer.colors.RED), err=True)


def print_success(msg: str) -> None:
    """Print a formatted success message.

    Args:
        msg: Success message to display
    """
    typer.echo(typer.style(msg, fg=typer.colors.GREEN))


def print_info(msg: str) -> None:
    typer.echo(typer.style(msg, fg=typer.colors.BLUE))


def print_warning(msg: str) -> None:
    typer.echo(typer.style(f"Warning: {msg}", fg=typer.colors.YELLOW), err=True)


def print_separator(char: str = "=", width: int = 60) -> None:
    typer.echo(char * width)


def print_header(title: str, width: int = 60) -> None:
    """Print a formatted header with separators."""
    print_separator("=", width)
    typer.echo(title)
    print_separator("=", width)


def describe_schedule(task: Task) -> str:
    """Short schedule label: the kind plus its repeat rule or date range."""
    if task.kind == TaskKind.CYCLE and task.repeat_rule:
        return f"cycle, {task.repeat_rule.value}"
    if task.kind == TaskKind.LONG_TERM and task.start_date and task.end_date:
        return f"long_term, {task.start_date.isoformat()} to {task.end_date.isoformat()}"
    return task.kind.value


def format_task_line(task: Task) -> str:
    """One-line summary used by ``list``."""
    marker = STATUS_MARKERS[task.status]
    return (
        f"{marker} {task.name}  {task.progress}/{task.target}  "
        f"({describe_schedule(task)})  id={task.id}"
    )


def print_task(task: Task) -> None:
    """Format and print a single task with all of its fields."""
    print_header(f"TASK: {task.name}")
    typer.echo(f"ID:          {task.id}")
    typer.echo(f"Status:      {task.status.value}")
    typer.echo(f"Schedule:    {describe_schedule(task)}")
    typer.echo(f"Progress:    {task.progress}/{task.target}")
    if task.description:
        typer.echo(f"Description: {task.description}")
    typer.echo(f"Created:     {task.created_at.isoformat()}")
    typer.echo(f"Updated:     {task.updated_at.isoformat()}")
    print_separator()


__all__ = [
    "CliState",
    "get_commands",
    "task_errors",
    "print_error",
    "print_success",
    "print_info",
    "print_warning",
    "print_separator",
    "print_header",
    "describe_schedule",
    "format_task_line",
    "print_task",
]
