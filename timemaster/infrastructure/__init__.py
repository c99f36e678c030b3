"""Infrastructure layer for timemaster.

Implementations of the ports the application layer depends on. At the
moment that is the task store (``timemaster.infrastructure.storage``),
the only place in the project that performs I/O.
"""
