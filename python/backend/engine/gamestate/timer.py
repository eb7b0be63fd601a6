"""Elapsed-time clock for a game in progress."""

from __future__ import annotations

import time
from typing import Callable


class TimerService:
    """Pausable stopwatch.

    Elapsed time is banked on every ``stop`` so a later ``start`` continues
    from where it left off.  The clock is injectable so tests can drive it.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._start_time: float = 0.0
        self._elapsed_banked: float = 0.0
        self._running: bool = False

    # -- time tracking --------------------------------------------------------

    @property
    def elapsed_time(self) -> float:
        if self._running:
            return self._elapsed_banked + (self._clock() - self._start_time)
        return self._elapsed_banked

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if not self._running:
            self._start_time = self._clock()
            self._running = True

    def stop(self) -> None:
        if self._running:
            self._elapsed_banked += self._clock() - self._start_time
            self._running = False

    def reset(self) -> None:
        self.stop()
        self._elapsed_banked = 0.0

    @property
    def label(self) -> str:
        return f"{self.elapsed_time:.1f} s"
