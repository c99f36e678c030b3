"""Entry point for the timemaster CLI.

Usage:
    python -m timemaster.interfaces.cli.main

Or via installed entry point:
    timemaster <command>
"""

from timemaster.interfaces.cli import app


def main() -> None:
    """Run the timemaster CLI application."""
    app()


if __name__ == "__main__":
    main()
