"""
Tick sources for the countdown.

A Ticker blocks until the next tick is due and returns False once it has
been cancelled.  drive() pumps ticks into a controller on the caller's own
thread, which keeps all session mutations on one thread of control.
"""

import threading
import time
from typing import Callable, Protocol

from .config import TICK_INTERVAL_SECONDS
from .models import TimerStatus


class Ticker(Protocol):
    def wait(self) -> bool:
        """Block until the next tick; False means stop driving."""
        ...

    def cancel(self) -> None: ...


class MonotonicTicker:
    """
    Real-time ticker aligned to a monotonic schedule.

    Deadlines are computed from the first wait() rather than from the
    previous wake-up, so slow listeners do not accumulate drift.
    cancel() is safe to call from another thread or a signal handler.
    """

    def __init__(
        self,
        interval: float = TICK_INTERVAL_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.interval = interval
        self._monotonic = monotonic
        self._cancelled = threading.Event()
        self._next_deadline: float | None = None

    def wait(self) -> bool:
        now = self._monotonic()
        if self._next_deadline is None:
            self._next_deadline = now + self.interval
        delay = max(0.0, self._next_deadline - now)
        if self._cancelled.wait(delay):
            return False
        self._next_deadline += self.interval
        return True

    def cancel(self) -> None:
        self._cancelled.set()

    def reset(self) -> None:
        """Re-align the schedule (after a pause) and clear cancellation."""
        self._cancelled.clear()
        self._next_deadline = None


class ManualTicker:
    """Fake clock for tests: wait() succeeds once per tick queued with advance()."""

    def __init__(self, ticks: int = 0):
        self.pending = ticks
        self.delivered = 0
        self._cancelled = False

    def advance(self, ticks: int = 1) -> None:
        self.pending += ticks

    def wait(self) -> bool:
        if self._cancelled or self.pending <= 0:
            return False
        self.pending -= 1
        self.delivered += 1
        return True

    def cancel(self) -> None:
        self._cancelled = True


def drive(controller, ticker: Ticker) -> int:
    """
    Feed ticks to ``controller`` until its timer stops running.

    Auto-advance re-arms the timer, so one call can run through several
    exercises.  Returns the number of ticks delivered.
    """
    delivered = 0
    while controller.timer.status is TimerStatus.RUNNING:
        if not ticker.wait():
            break
        controller.tick()
        delivered += 1
    return delivered
