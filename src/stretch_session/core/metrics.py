"""
Display metrics and time formatting for sessions and the countdown.
"""

from typing import Any

from .models import Session, TimerState


def format_clock(seconds: int) -> str:
    """
    Countdown display: bare seconds under a minute, M:SS above.

    >>> format_clock(45)
    '45'
    >>> format_clock(65)
    '1:05'
    """
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    if minutes > 0:
        return f"{minutes}:{secs:02d}"
    return f"{secs}"


def format_duration(seconds: float) -> str:
    """
    Human duration: "45s" or "2m 5s".
    """
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_exercise_time(seconds: int) -> str:
    """Exercise length for listings: "30s" or "1:30"."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    if minutes > 0:
        return f"{minutes}:{secs:02d}"
    return f"{secs}s"


def timer_progress(state: TimerState) -> float:
    """Fraction of the current countdown already elapsed, clamped to [0, 1]."""
    if state.duration <= 0:
        return 0.0
    progress = (state.duration - state.remaining) / state.duration
    return max(0.0, min(1.0, progress))


def session_summary(session: Session) -> dict[str, Any]:
    """Flat summary used by the CLI end-of-session panel and the history table."""
    return {
        "session_id": session.session_id,
        "category": session.category_id,
        "exercises": session.total,
        "reached": session.index + 1,
        "visited": session.visited,
        "stretch_time": format_duration(session.elapsed_seconds),
        "duration": format_duration(session.duration_seconds),
        "completed": session.completed,
    }
