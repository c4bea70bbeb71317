"""
JSON serialization for session data.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import json
from datetime import datetime
from typing import Any

from ..core.models import Exercise, Session


class ValidationError(Exception):
    """Raised when stored data cannot be turned back into models."""

    pass


def validate_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp.

    Raises:
        ValidationError: If the value is not a valid timestamp
    """
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid timestamp: {value!r}") from e


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """Convert an Exercise to a JSON-compatible dict."""
    d: dict[str, Any] = {
        "id": exercise.exercise_id,
        "position": exercise.position,
        "name": exercise.name,
        "instruction": exercise.instruction,
        "duration": exercise.duration_seconds,
        "restricted": exercise.restricted,
        "difficulty": exercise.difficulty,
    }
    if exercise.category_id is not None:
        d["category_id"] = exercise.category_id
    if exercise.image is not None:
        d["image"] = exercise.image
    return d


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert a dict to an Exercise.

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    try:
        return Exercise(
            exercise_id=str(data["id"]),
            position=int(data["position"]),
            name=str(data["name"]),
            instruction=str(data.get("instruction", "")),
            duration_seconds=int(data["duration"]),
            restricted=bool(data.get("restricted", False)),
            category_id=data.get("category_id"),
            difficulty=int(data.get("difficulty", 1)),
            image=data.get("image"),
        )
    except KeyError as e:
        raise ValidationError(f"Missing exercise field: {e}") from e
    except ValueError as e:
        raise ValidationError(f"Invalid exercise: {e}") from e


def session_to_dict(session: Session) -> dict[str, Any]:
    """
    Convert a Session to a JSON-compatible dict.

    The exercise order is stored as ids plus the full snapshot so that a
    shuffled order can be reconstructed.
    """
    return {
        "session_id": session.session_id,
        "category_id": session.category_id,
        "index": session.index,
        "elapsed_seconds": session.elapsed_seconds,
        "visited": session.visited,
        "visited_ids": list(session.visited_ids),
        "started_at": session.started_at.isoformat(),
        "ended_at": session.ended_at.isoformat() if session.ended_at else None,
        "completed": session.completed,
        "active": session.active,
        "exercises": [exercise_to_dict(e) for e in session.exercises],
    }


def dict_to_session(data: dict[str, Any]) -> Session:
    """
    Convert a dict to a Session.

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    try:
        exercises = tuple(dict_to_exercise(e) for e in data["exercises"])
        ended_raw = data.get("ended_at")
        return Session(
            exercises=exercises,
            category_id=data.get("category_id"),
            session_id=str(data["session_id"]),
            index=int(data.get("index", 0)),
            elapsed_seconds=int(data.get("elapsed_seconds", 0)),
            visited=int(data.get("visited", 0)),
            started_at=validate_timestamp(data["started_at"]),
            ended_at=validate_timestamp(ended_raw) if ended_raw else None,
            completed=bool(data.get("completed", False)),
            active=bool(data.get("active", True)),
            visited_ids=[str(v) for v in data.get("visited_ids") or []],
        )
    except KeyError as e:
        raise ValidationError(f"Missing session field: {e}") from e
    except ValueError as e:
        raise ValidationError(f"Invalid session: {e}") from e


def event_to_json_line(event: str, session: Session, recorded_at: datetime) -> str:
    """Serialize one gateway event as a compact JSON line (no trailing newline)."""
    return json.dumps(
        {
            "event": event,
            "recorded_at": recorded_at.isoformat(),
            "session": session_to_dict(session),
        },
        separators=(",", ":"),
    )
