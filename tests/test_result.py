import pytest

from timemaster.domain.shared import Err, Ok, is_ok, unwrap
from timemaster.domain.task import NotFound


def test_unwrap_returns_value() -> None:
    assert unwrap(Ok(3)) == 3
    assert is_ok(Ok(3))
    assert not is_ok(Err("nope"))


def test_unwrap_raises_carried_exception() -> None:
    with pytest.raises(NotFound, match="t1"):
        unwrap(Err(NotFound("t1")))


def test_unwrap_wraps_plain_errors() -> None:
    with pytest.raises(RuntimeError, match="disk full"):
        unwrap(Err("disk full"))
