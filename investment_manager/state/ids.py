"""
Identifier generation for budget entries, holdings and accounts.

Ids look like millisecond timestamps, which keeps them compatible with
data saved by earlier versions, but they are strictly increasing: two
items created in the same millisecond still get distinct ids.
"""

import time
from typing import Callable, Iterable


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class MonotonicIdGenerator:
    """Hands out increasing integer ids, never less than the current time in ms."""

    def __init__(self, clock: Callable[[], int] = _now_ms):
        self._clock = clock
        self._last = 0

    def next_id(self) -> int:
        self._last = max(self._clock(), self._last + 1)
        return self._last

    def observe(self, ids: Iterable[int]) -> None:
        """Make sure future ids are above every id already in use."""
        for existing in ids:
            if existing > self._last:
                self._last = existing
