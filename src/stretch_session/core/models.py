"""
Data models for stretch-session.

Exercises are immutable once loaded.  A Session holds a snapshot of the
exercise sequence for its whole lifetime, so catalog edits made after
start() never leak into a running session.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from .config import DIFFICULTY_MAX, DIFFICULTY_MIN


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Exercise:
    """
    A single timed exercise within a category.

    ``restricted`` marks exercises that need an entitlement beyond the free
    tier.  ``difficulty`` is clamped into 1..5 rather than rejected.
    """

    exercise_id: str
    position: int                   # 1-based ordinal within the category
    name: str
    instruction: str
    duration_seconds: int
    restricted: bool = False
    category_id: str | None = None
    difficulty: int = 1
    image: str | None = None

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if self.position < 1:
            raise ValueError("position must be positive")
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")
        clamped = max(DIFFICULTY_MIN, min(DIFFICULTY_MAX, self.difficulty))
        if clamped != self.difficulty:
            object.__setattr__(self, "difficulty", clamped)


@dataclass
class Session:
    """
    One run-through of a category's exercise sequence.

    Mutated only by SessionController.  ``index`` always points into
    ``exercises``; once ``completed`` is set the session is inactive and
    ``ended_at`` is stamped.  ``visited_ids`` lists every exercise the
    session landed on, in order, starting with the first.
    """

    exercises: tuple[Exercise, ...]
    category_id: str | None = None
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    index: int = 0
    elapsed_seconds: int = 0
    visited: int = 0
    started_at: datetime = field(default_factory=utc_now)
    ended_at: datetime | None = None
    completed: bool = False
    active: bool = True
    visited_ids: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate session data."""
        self.exercises = tuple(self.exercises)
        if not self.exercises:
            raise ValueError("Session needs at least one exercise")
        if not 0 <= self.index < len(self.exercises):
            raise ValueError(f"index {self.index} out of range")
        if self.elapsed_seconds < 0:
            raise ValueError("elapsed_seconds must be non-negative")
        if not self.visited_ids:
            self.visited_ids = [self.current_exercise.exercise_id]

    @property
    def current_exercise(self) -> Exercise:
        return self.exercises[self.index]

    @property
    def total(self) -> int:
        return len(self.exercises)

    @property
    def can_go_previous(self) -> bool:
        return self.index > 0

    @property
    def can_go_next(self) -> bool:
        return self.index < len(self.exercises) - 1

    @property
    def progress(self) -> float:
        """Fraction of the sequence reached, counting the current exercise."""
        return (self.index + 1) / len(self.exercises)

    @property
    def duration_seconds(self) -> float:
        """Wall-clock seconds since start (up to ended_at once completed)."""
        end = self.ended_at if self.ended_at is not None else utc_now()
        return (end - self.started_at).total_seconds()


class TimerStatus(str, Enum):
    """Countdown timer states."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TimerState:
    """Read-only view of the countdown timer."""

    status: TimerStatus = TimerStatus.IDLE
    remaining: int = 0
    duration: int = 0

    @property
    def is_running(self) -> bool:
        return self.status is TimerStatus.RUNNING


@dataclass(frozen=True)
class SessionState:
    """
    Immutable snapshot of a session and its timer.

    Returned by SessionController.state() and handed to listeners after
    every change, so callers never hold a reference to mutable state.
    """

    session_id: str
    category_id: str | None
    index: int
    total: int
    exercise: Exercise
    elapsed_seconds: int
    visited: int
    active: bool
    completed: bool
    timer: TimerState

    @classmethod
    def capture(cls, session: Session, timer: TimerState) -> "SessionState":
        return cls(
            session_id=session.session_id,
            category_id=session.category_id,
            index=session.index,
            total=session.total,
            exercise=session.current_exercise,
            elapsed_seconds=session.elapsed_seconds,
            visited=session.visited,
            active=session.active,
            completed=session.completed,
            timer=timer,
        )


# ---------------------------------------------------------------------------
# Navigation outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Advanced:
    """Position changed; ``to`` is the new index."""

    to: int
    moved: bool = field(default=True, init=False)


@dataclass(frozen=True)
class AtEnd:
    """Already on the last exercise.  Does not complete the session."""

    moved: bool = field(default=False, init=False)


@dataclass(frozen=True)
class AtStart:
    """Already on the first exercise."""

    moved: bool = field(default=False, init=False)


@dataclass(frozen=True)
class NoFreeExerciseAhead:
    """
    Every later exercise is restricted and access was denied.

    ``blocked`` is the first exercise the user was refused, which is what an
    upgrade prompt should present.
    """

    blocked: Exercise
    moved: bool = field(default=False, init=False)


NavigationResult = Advanced | AtEnd | AtStart | NoFreeExerciseAhead
