"""
Outbound notifications: the persistence gateway and session listeners.

Gateway delivery is fire-and-forget.  notify_gateway() logs and swallows
any exception so that storage problems can never fail or roll back a
navigation call.
"""

import logging
from typing import Protocol

from .models import Exercise, Session, SessionState

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """Receives session lifecycle events for storage."""

    def on_session_started(self, session: Session) -> None: ...

    def on_progress(self, session: Session) -> None: ...

    def on_session_completed(self, session: Session) -> None: ...


class NullGateway:
    """Gateway that stores nothing."""

    def on_session_started(self, session: Session) -> None:
        pass

    def on_progress(self, session: Session) -> None:
        pass

    def on_session_completed(self, session: Session) -> None:
        pass


class SessionListener:
    """
    Base class for caller-side observers.  Override the hooks you need.

    All hooks run on the controller's thread of control while it holds its
    lock; they must not block.
    """

    def on_state(self, state: SessionState) -> None:
        """Any change of position, order, elapsed time or completion."""

    def on_tick(self, state: SessionState) -> None:
        """One countdown second passed; state.timer.remaining is current."""

    def on_expired(self, state: SessionState) -> None:
        """The countdown for state.exercise reached zero."""

    def on_gating_required(self, exercise: Exercise) -> None:
        """Forward navigation hit a restricted exercise the user may not open."""


_GATEWAY_HOOKS = ("on_session_started", "on_progress", "on_session_completed")


def notify_gateway(gateway: PersistenceGateway, event: str, session: Session) -> bool:
    """
    Deliver one event to the gateway.

    Returns:
        True if the gateway accepted the event, False if it raised
    """
    if event not in _GATEWAY_HOOKS:
        raise ValueError(f"Unknown gateway event: {event}")
    try:
        getattr(gateway, event)(session)
    except Exception:
        logger.exception("Persistence gateway failed on %s for session %s", event, session.session_id)
        return False
    return True
