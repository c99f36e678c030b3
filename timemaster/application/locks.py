"""Per-key locking and timestamping for the task engine."""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from timemaster.domain.task import utc_now


@dataclass
class _Slot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class KeyedLock:
    """A registry of exclusive locks, one per key.

    Holding the lock for one key never blocks another key. Slots are
    reference counted and dropped once nobody holds or waits on them, so
    the registry only grows with the number of keys in flight.

    Example:
        locks = KeyedLock()
        with locks.hold(task_id):
            ...  # load, compute, save
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: dict[str, _Slot] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.holders += 1

        slot.lock.acquire()
        try:
            yield
        finally:
            slot.lock.release()
            with self._guard:
                slot.holders -= 1
                if slot.holders == 0:
                    del self._slots[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)


class MonotonicClock:
    """UTC clock that never hands out the same instant twice.

    Successive calls return strictly increasing datetimes even when the
    wall clock stalls or steps back, which keeps "most recently updated"
    ordering total.
    """

    def __init__(self, source: Callable[[], datetime] = utc_now) -> None:
        self._source = source
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self, after: datetime | None = None) -> datetime:
        """Return the next instant, also strictly later than ``after`` if given."""
        with self._lock:
            current = self._source()
            floor = max((t for t in (self._last, after) if t is not None), default=None)
            if floor is not None and current <= floor:
                current = floor + timedelta(microseconds=1)
            self._last = current
            return current
