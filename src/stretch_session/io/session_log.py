"""
JSONL-based session log.

Implements the persistence gateway: every lifecycle event is appended as
one JSON object per line.  The log is append-only; readers fold the events
back into the latest known state of each session.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..core.config import SESSION_LOG_FILE_NAME
from ..core.config_loader import get_app_dir
from ..core.models import Session, utc_now
from .serializers import ValidationError, dict_to_session, event_to_json_line, validate_timestamp

logger = logging.getLogger(__name__)

EVENT_STARTED = "started"
EVENT_PROGRESS = "progress"
EVENT_COMPLETED = "completed"


@dataclass
class SessionEvent:
    """One decoded line of the session log."""

    event: str
    recorded_at: datetime
    session: Session


class SessionLog:
    """
    Append-only store of session events.

    Write failures raise from here; the controller's notify_gateway()
    is what keeps them from reaching session logic.
    """

    def __init__(self, log_path: str | Path):
        """
        Initialize the session log.

        Args:
            log_path: Path to the JSONL file (created on first write)
        """
        self.log_path = Path(log_path)

    def exists(self) -> bool:
        return self.log_path.exists()

    # ------------------------------------------------------------------
    # PersistenceGateway
    # ------------------------------------------------------------------

    def on_session_started(self, session: Session) -> None:
        self._append(EVENT_STARTED, session)

    def on_progress(self, session: Session) -> None:
        self._append(EVENT_PROGRESS, session)

    def on_session_completed(self, session: Session) -> None:
        self._append(EVENT_COMPLETED, session)

    def _append(self, event: str, session: Session) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(event_to_json_line(event, session, utc_now()) + "\n")

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def load_events(self) -> list[SessionEvent]:
        """
        Load all events in file order.

        Returns:
            List of SessionEvent; empty if the log does not exist yet

        Raises:
            ValidationError: If a line cannot be decoded
        """
        if not self.log_path.exists():
            return []

        events: list[SessionEvent] = []
        with open(self.log_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                    events.append(
                        SessionEvent(
                            event=str(data["event"]),
                            recorded_at=validate_timestamp(data["recorded_at"]),
                            session=dict_to_session(data["session"]),
                        )
                    )
                except (json.JSONDecodeError, KeyError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.log_path}: {e}"
                    ) from e
        return events

    def latest_sessions(self) -> list[Session]:
        """Latest recorded state of every session, ordered by start time."""
        latest: dict[str, Session] = {}
        for ev in self.load_events():
            latest[ev.session.session_id] = ev.session
        return sorted(latest.values(), key=lambda s: s.started_at)

    def completed_sessions(self) -> list[Session]:
        return [s for s in self.latest_sessions() if s.completed]

    def usage_counts(self) -> Counter[str]:
        """
        How many completed sessions visited each exercise.

        Exercises skipped by access gating were never opened and do not
        count; revisiting an exercise within one session counts once.
        """
        counts: Counter[str] = Counter()
        for session in self.completed_sessions():
            for exercise_id in set(session.visited_ids):
                counts[exercise_id] += 1
        return counts

    def clear(self) -> None:
        """
        Clear the whole log (dangerous - use with caution).
        """
        if self.log_path.exists():
            self.log_path.write_text("")
            logger.info("Cleared session log %s", self.log_path)


def get_default_log_path() -> Path:
    """Default session log: <app dir>/sessions.jsonl."""
    return get_app_dir() / SESSION_LOG_FILE_NAME
