"""Shared domain utilities.

- Result monad for explicit error handling

Example usage:
    >>> from timemaster.domain.shared import Ok, Err, Result, is_ok
    >>>
    >>> def parse_target(raw: str) -> Result[int, str]:
    ...     if not raw.isdigit():
    ...         return Err("target must be a number")
    ...     return Ok(int(raw))
"""

from timemaster.domain.shared.result import Err, Ok, Result, is_ok, unwrap

__all__ = [
    "Ok",
    "Err",
    "Result",
    "is_ok",
    "unwrap",
]
