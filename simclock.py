# simclock.py
from __future__ import annotations
import time
from typing import Callable, Optional


class SimClock:
    """
    Process-wide elapsed-time source.
    start() is called once at launch; elapsed_ms() is read from every node
    thread without locking (the origin never changes after start).
    """
    def __init__(self, time_source: Callable[[], float] = time.perf_counter):
        self._time_source = time_source
        self._origin: Optional[float] = None

    @property
    def started(self) -> bool:
        return self._origin is not None

    def start(self):
        # never reset
        if self._origin is None:
            self._origin = self._time_source()

    def elapsed_ms(self) -> int:
        if self._origin is None:
            return 0
        # round to microseconds first so float noise never costs a whole ms
        us = int((self._time_source() - self._origin) * 1_000_000 + 0.5)
        return max(0, us // 1000)
