"""timemaster - task lifecycle and persistence engine for personal task tracking."""

__version__ = "0.1.0"
