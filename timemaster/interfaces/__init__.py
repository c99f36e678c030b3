"""Interface layer for timemaster.

- commands: the command surface the presentation layer calls
- api: FastAPI router and app factory
- cli: Typer command-line interface
"""
