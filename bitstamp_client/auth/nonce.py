"""Strictly increasing nonces for signed Bitstamp requests."""

from __future__ import annotations

import time
from typing import Callable, Optional

NONCE_COUNTER_WIDTH = 4
MAX_COUNTER = 10**NONCE_COUNTER_WIDTH - 1


def wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


class NonceGenerator:
    """Produces nonces of the form ``<ms timestamp><4-digit counter>``.

    Several requests in the same millisecond get increasing counters. When
    the counter runs out of digits the generator moves on to the next
    millisecond instead, and a clock that steps backwards is held at the last
    issued timestamp, so every nonce compares greater than the previous one
    both as a number and as a string.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or wall_clock_ms
        self._last: Optional[int] = None
        self._counter = 0

    def next(self) -> str:  # noqa: A003
        now = self._clock()
        if self._last is not None and now <= self._last:
            now = self._last
            self._counter += 1
            if self._counter > MAX_COUNTER:
                now = self._last + 1
                self._counter = 0
        else:
            self._counter = 0
        self._last = now
        return f"{now}{self._counter:0{NONCE_COUNTER_WIDTH}d}"


__all__ = ["NonceGenerator", "wall_clock_ms", "NONCE_COUNTER_WIDTH"]
