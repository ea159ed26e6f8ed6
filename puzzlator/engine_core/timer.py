"""
Puzzle Timer - Wall-clock play time with pause support.

The clock is injected so tests can drive time deterministically.
Elapsed time is reported in whole seconds and excludes paused intervals.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import time


@dataclass
class TimerSnapshot:
    """Serializable timer fields (absolute clock readings, in seconds)."""
    started_at: float | None = None
    stopped_at: float | None = None
    paused_at: float | None = None
    paused_total: float = 0.0


class PuzzleTimer:
    """
    Start/stop/pause timer.

    Usage:
        timer = PuzzleTimer()
        timer.start()
        ...
        timer.pause()
        timer.resume()
        timer.stop()
        seconds = timer.elapsed()
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._started_at: float | None = None
        self._stopped_at: float | None = None
        self._paused_at: float | None = None
        self._paused_total: float = 0.0

    @property
    def started_at(self) -> float | None:
        return self._started_at

    @property
    def stopped_at(self) -> float | None:
        return self._stopped_at

    @property
    def is_running(self) -> bool:
        return (
            self._started_at is not None
            and self._stopped_at is None
            and self._paused_at is None
        )

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    def start(self):
        """Start the timer. No-op if it was already started."""
        if self._started_at is None:
            self._started_at = self.clock()

    def stop(self):
        """Freeze the timer. A paused timer stops at the pause point."""
        if self._started_at is None or self._stopped_at is not None:
            return
        if self._paused_at is not None:
            self._stopped_at = self._paused_at
            self._paused_at = None
        else:
            self._stopped_at = self.clock()

    def reopen(self):
        """Undo a stop(). Time since the original start keeps counting."""
        self._stopped_at = None

    def pause(self):
        if self.is_running:
            self._paused_at = self.clock()

    def resume(self):
        if self._paused_at is not None:
            self._paused_total += self.clock() - self._paused_at
            self._paused_at = None

    def elapsed(self) -> int:
        """Whole seconds of active play (0 if never started)."""
        if self._started_at is None:
            return 0
        if self._stopped_at is not None:
            end = self._stopped_at
        elif self._paused_at is not None:
            end = self._paused_at
        else:
            end = self.clock()
        return max(0, int(end - self._started_at - self._paused_total))

    def reset(self):
        self._started_at = None
        self._stopped_at = None
        self._paused_at = None
        self._paused_total = 0.0

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            started_at=self._started_at,
            stopped_at=self._stopped_at,
            paused_at=self._paused_at,
            paused_total=self._paused_total,
        )

    def restore(self, snapshot: TimerSnapshot):
        self._started_at = snapshot.started_at
        self._stopped_at = snapshot.stopped_at
        self._paused_at = snapshot.paused_at
        self._paused_total = snapshot.paused_total
