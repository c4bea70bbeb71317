"""
Cooperative countdown timer.

The timer owns no thread and no clock.  Something else (a Ticker, a test,
or a UI event loop) calls tick() once per elapsed second; the timer only
moves counters and reports what happened.  Every operation is legal in
every state: misuse is a no-op that returns False.

State machine:
    IDLE --start--> RUNNING --pause--> PAUSED --resume--> RUNNING
    RUNNING --tick (remaining hits 0)--> EXPIRED --> IDLE
    any --stop--> IDLE   (no expiry notification)
"""

from enum import Enum
from typing import Callable

from .config import MIN_EXERCISE_SECONDS
from .models import TimerState, TimerStatus

TickListener = Callable[[int], None]
ExpiryListener = Callable[[], None]


class TickOutcome(str, Enum):
    """Result of a single tick() call."""

    IGNORED = "ignored"    # timer was not running
    TICKED = "ticked"      # remaining decreased, still > 0
    EXPIRED = "expired"    # remaining reached 0 on this tick


class CountdownTimer:
    """Per-exercise countdown, re-armed with start() for every exercise."""

    def __init__(self) -> None:
        self._status = TimerStatus.IDLE
        self._remaining = 0
        self._duration = 0
        self._tick_listeners: list[TickListener] = []
        self._expiry_listeners: list[ExpiryListener] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def status(self) -> TimerStatus:
        return self._status

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def duration(self) -> int:
        return self._duration

    def snapshot(self) -> TimerState:
        return TimerState(status=self._status, remaining=self._remaining, duration=self._duration)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_tick_listener(self, listener: TickListener) -> None:
        self._tick_listeners.append(listener)

    def add_expiry_listener(self, listener: ExpiryListener) -> None:
        self._expiry_listeners.append(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, duration: int) -> None:
        """
        Arm the timer for a new exercise and start running.

        Any previous countdown is stopped first, so there is never more
        than one live countdown per timer.

        Raises:
            ValueError: If duration is below one second
        """
        if duration < MIN_EXERCISE_SECONDS:
            raise ValueError(f"duration must be at least {MIN_EXERCISE_SECONDS}s, got {duration}")
        self.stop()
        self._duration = duration
        self._remaining = duration
        self._status = TimerStatus.RUNNING

    def pause(self) -> bool:
        if self._status is not TimerStatus.RUNNING:
            return False
        self._status = TimerStatus.PAUSED
        return True

    def resume(self) -> bool:
        if self._status is not TimerStatus.PAUSED:
            return False
        self._status = TimerStatus.RUNNING
        return True

    def stop(self) -> bool:
        """Return to IDLE without firing expiry.  Returns False if already idle."""
        was_idle = self._status is TimerStatus.IDLE
        self._status = TimerStatus.IDLE
        return not was_idle

    def tick(self) -> TickOutcome:
        """
        Advance the countdown by one second.

        Expiry listeners run exactly once, while the status reads EXPIRED.
        A listener may re-arm the timer with start(); otherwise the timer
        settles in IDLE with remaining == 0.
        """
        if self._status is not TimerStatus.RUNNING:
            return TickOutcome.IGNORED

        self._remaining -= 1
        for listener in list(self._tick_listeners):
            listener(self._remaining)

        # A tick listener may have stopped or paused us.
        if self._remaining > 0 or self._status is not TimerStatus.RUNNING:
            return TickOutcome.TICKED

        self._status = TimerStatus.EXPIRED
        for expiry_listener in list(self._expiry_listeners):
            expiry_listener()
        if self._status is TimerStatus.EXPIRED:
            self._status = TimerStatus.IDLE
        return TickOutcome.EXPIRED
