"""Result monad for explicit error handling in domain and storage operations.

Operations that can fail in an expected way (a missing task, an illegal
transition, an unreadable file) return ``Ok(value)`` or ``Err(error)``
instead of raising. Callers branch on the variant, or call ``unwrap`` at
the boundary where an exception is the better contract.

Example usage:
    >>> def clamp_target(target: int) -> Result[int, str]:
    ...     if target < 1:
    ...         return Err("target must be at least 1")
    ...     return Ok(target)
    ...
    >>> result = clamp_target(3)
    >>> if is_ok(result):
    ...     print(f"Target: {result.value}")
    Target: 3
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value.

    Attributes:
        value: The success value of type T.
    """

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error.

    Attributes:
        error: The error value of type E.
    """

    error: E


# Using Union here as TypeVar aliases don't work with | syntax at runtime
Result = Union[Ok[T], Err[E]]  # noqa: UP007


def is_ok(result: Ok[T] | Err[E]) -> bool:
    """Check if a result is successful."""
    return isinstance(result, Ok)


def unwrap(result: Ok[T] | Err[E]) -> T:
    """Extract the value from a Result, raising if it's an error.

    Exceptions carried by an Err are raised as-is; any other error value
    is wrapped in a RuntimeError.

    Args:
        result: The result to unwrap.

    Returns:
        The Ok value.

    Raises:
        The carried exception, or RuntimeError for non-exception errors.
    """
    if isinstance(result, Ok):
        return result.value
    if isinstance(result.error, BaseException):
        raise result.error
    raise RuntimeError(str(result.error))
