"""CLI command groups for timemaster.

Command groups:
- task: Task lifecycle (list, add, edit, progress, archive, reopen, ...)
- server: The ``serve`` command running the HTTP API

Each command group is registered with the main app in
``timemaster.interfaces.cli``.
"""

from timemaster.interfaces.cli.commands import server, task

__all__ = ["task", "server"]
