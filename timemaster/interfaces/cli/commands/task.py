"""Task management CLI commands.

Commands for the task lifecycle: listing, creating and editing tasks,
recording progress, archiving and reopening, and dashboard stats.
"""

import json
from pathlib import Path
from typing import Optional

import typer

from timemaster.domain.task import RepeatRule, TaskKind, TaskStatus
from timemaster.interfaces.cli.common import (
    format_task_line,
    get_commands,
    print_error,
    print_header,
    print_info,
    print_success,
    print_task,
    print_warning,
    task_errors,
)

app = typer.Typer(help="Task management commands")


# =============================================================================
# Queries
# =============================================================================


@app.command("list")
def list_tasks(
    ctx: typer.Context,
    status: Optional[TaskStatus] = typer.Option(
        None, "--status", "-s", help="Only show tasks with this status"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print tasks as JSON"),
) -> None:
    """List tasks, most recently updated first."""
    commands = get_commands(ctx)
    with task_errors():
        tasks = commands.list_tasks(status)

    if as_json:
        typer.echo(json.dumps([t.model_dump(mode="json") for t in tasks], indent=2))
        return

    if not tasks:
        print_info("No tasks yet. Add one with: timemaster add NAME")
        return
    for t in tasks:
        typer.echo(format_task_line(t))


@app.command("show")
def show(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task id"),
) -> None:
    """Show every field of one task."""
    commands = get_commands(ctx)
    with task_errors():
        task = commands.get_task({"id": task_id})
    print_task(task)


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    """Show task counts and the completion rate."""
    commands = get_commands(ctx)
    with task_errors():
        s = commands.task_stats()

    print_header("TASK STATS")
    typer.echo(f"Active:          {s.active}")
    typer.echo(f"Completed:       {s.completed}")
    typer.echo(f"Archived:        {s.archived}")
    typer.echo(f"Completion rate: {s.completion_rate}%")


# =============================================================================
# Commands
# =============================================================================


@app.command("add")
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Task name"),
    kind: TaskKind = typer.Option(TaskKind.ONCE, "--kind", "-k", help="once, cycle or long_term"),
    target: int = typer.Option(1, "--target", "-t", help="Progress steps needed to complete"),
    description: str = typer.Option("", "--description", "-d", help="Longer description"),
    repeat: Optional[RepeatRule] = typer.Option(
        None, "--repeat", "-r", help="Repeat rule for cycle tasks"
    ),
    start: Optional[str] = typer.Option(None, "--start", help="Start date (YYYY-MM-DD), long_term only"),
    end: Optional[str] = typer.Option(None, "--end", help="End date (YYYY-MM-DD), long_term only"),
    task_id: Optional[str] = typer.Option(None, "--id", help="Use this id instead of a generated one"),
) -> None:
    """Create a new task."""
    commands = get_commands(ctx)
    payload = {
        "id": task_id,
        "name": name,
        "description": description,
        "kind": kind,
        "target": target,
        "repeat_rule": repeat,
        "start_date": start,
        "end_date": end,
    }
    with task_errors():
        task = commands.create_task(payload)
    print_success(f"Created task '{task.name}' ({task.id})")


@app.command("edit")
def edit(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task id"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    target: Optional[int] = typer.Option(None, "--target", "-t", help="New target"),
    repeat: Optional[RepeatRule] = typer.Option(None, "--repeat", "-r", help="New repeat rule"),
    start: Optional[str] = typer.Option(None, "--start", help="New start date"),
    end: Optional[str] = typer.Option(None, "--end", help="New end date"),
) -> None:
    """Edit a task. Options left out keep their current value."""
    commands = get_commands(ctx)
    payload = {
        "id": task_id,
        "name": name,
        "description": description,
        "target": target,
        "repeat_rule": repeat,
        "start_date": start,
        "end_date": end,
    }
    with task_errors():
        task = commands.update_task(payload)
    print_success(f"Updated task '{task.name}'")
    typer.echo(format_task_line(task))


@app.command("progress")
def progress(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task id"),
) -> None:
    """Record one step of progress."""
    commands = get_commands(ctx)
    with task_errors():
        task = commands.increase_task_progress({"id": task_id})

    if task.status == TaskStatus.COMPLETED:
        print_success(f"Completed '{task.name}' ({task.progress}/{task.target})")
    else:
        print_success(f"Progress on '{task.name}': {task.progress}/{task.target}")


@app.command("archive")
def archive(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task id"),
) -> None:
    """Archive a task. Reopen brings it back."""
    commands = get_commands(ctx)
    with task_errors():
        task = commands.archive_task({"id": task_id})
    print_success(f"Archived '{task.name}'")


@app.command("reopen")
def reopen(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task id"),
) -> None:
    """Reopen an archived task. Cycle tasks restart at 0."""
    commands = get_commands(ctx)
    with task_errors():
        task = commands.reopen_task({"id": task_id})
    print_success(f"Reopened '{task.name}' ({task.progress}/{task.target})")


@app.command("delete")
def delete(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a task permanently."""
    if not yes:
        typer.confirm(f"Delete task {task_id}? This cannot be undone", abort=True)
    commands = get_commands(ctx)
    with task_errors():
        commands.delete_task({"id": task_id})
    print_success(f"Deleted task {task_id}")


# =============================================================================
# Bulk
# =============================================================================


@app.command("import")
def import_tasks(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="JSON file holding a list of task payloads"),
) -> None:
    """Create tasks from a JSON file. Bad entries are skipped and reported."""
    try:
        payloads = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print_error(f"Cannot read {path}: {e}")
        raise typer.Exit(1) from e
    if not isinstance(payloads, list):
        print_error(f"{path} must contain a JSON list of tasks")
        raise typer.Exit(1)

    commands = get_commands(ctx)
    with task_errors():
        report = commands.import_tasks(payloads)

    for failure in report.failed:
        print_warning(f"Entry #{failure.index} skipped: {failure.detail}")
    print_success(f"Imported {len(report.created)} of {len(payloads)} tasks")
    if report.failed:
        raise typer.Exit(1)


@app.command("seed")
def seed(ctx: typer.Context) -> None:
    """Create sample tasks if the store is empty."""
    commands = get_commands(ctx)
    with task_errors():
        created = commands.seed_defaults()

    if not created:
        print_info("Store already has tasks; nothing seeded.")
        return
    print_success(f"Seeded {len(created)} sample tasks")
