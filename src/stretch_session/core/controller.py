"""
Session controller: navigation, shuffle, restart and completion.

The controller owns the Session and drives the CountdownTimer.  All public
methods, tick() included, run under one re-entrant lock, so a timer tick
can never interleave with a manual navigation call even when ticks are
produced on another thread.

Forward navigation consults the access policy at call time.  Backward
navigation is never gated.
"""

import logging
import random
import threading
from typing import Callable, Sequence

from ..errors import EmptyCatalogError, InvalidOperation
from .access import AccessPolicy, FreeTierOnly
from .catalog.base import CatalogProvider
from .config import SessionSettings
from .events import NullGateway, PersistenceGateway, SessionListener, notify_gateway
from .models import (
    Advanced,
    AtEnd,
    AtStart,
    Exercise,
    NavigationResult,
    NoFreeExerciseAhead,
    Session,
    SessionState,
    TimerStatus,
    utc_now,
)
from .timer import CountdownTimer, TickOutcome

logger = logging.getLogger(__name__)


class SessionController:
    """
    Drives one user through a category's exercises.

    Collaborators are injected so tests can substitute fakes:

    Args:
        catalog: Provider used by start_category() and restart()
        access_policy: Decides whether restricted exercises may be opened
        gateway: Receives started/progress/completed events (best-effort)
        timer: Countdown for the current exercise
        rng: Random source for shuffle()
        settings: Auto-advance / auto-complete switches
    """

    def __init__(
        self,
        catalog: CatalogProvider | None = None,
        access_policy: AccessPolicy | None = None,
        gateway: PersistenceGateway | None = None,
        timer: CountdownTimer | None = None,
        rng: random.Random | None = None,
        settings: SessionSettings | None = None,
    ):
        self.catalog = catalog
        self.access_policy: AccessPolicy = access_policy if access_policy is not None else FreeTierOnly()
        self.gateway: PersistenceGateway = gateway if gateway is not None else NullGateway()
        self.timer = timer if timer is not None else CountdownTimer()
        self.rng = rng if rng is not None else random.Random()
        self.settings = settings if settings is not None else SessionSettings()

        self._lock = threading.RLock()
        self._session: Session | None = None
        self._source: tuple[Exercise, ...] = ()
        self._listeners: list[SessionListener] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def has_session(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> Session:
        """
        The live session.

        Raises:
            InvalidOperation: If no session has been started
        """
        if self._session is None:
            raise InvalidOperation("No session in progress; call start() first")
        return self._session

    def state(self) -> SessionState:
        with self._lock:
            return SessionState.capture(self.session, self.timer.snapshot())

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, exercises: Sequence[Exercise], category_id: str | None = None) -> Session:
        """
        Begin a new session positioned on the first exercise.

        The sequence is copied; later changes to the caller's list do not
        reach the session.

        Raises:
            EmptyCatalogError: If exercises is empty (no session is created)
        """
        snapshot = tuple(exercises)
        if not snapshot:
            raise EmptyCatalogError(
                f"Cannot start a session for {category_id or 'an empty list'}: no exercises"
            )
        with self._lock:
            self.timer.stop()
            self._source = snapshot
            self._session = Session(exercises=snapshot, category_id=category_id)
            logger.debug(
                "Started session %s (%s, %d exercises)",
                self._session.session_id, category_id, len(snapshot),
            )
            notify_gateway(self.gateway, "on_session_started", self._session)
            self._emit_state()
            return self._session

    def start_category(self, category_id: str) -> Session:
        """
        Fetch a category from the catalog and start it.

        Raises:
            InvalidOperation: If the controller has no catalog
            CatalogUnavailable: Propagated unchanged from the catalog
            EmptyCatalogError: If the category has no exercises
        """
        if self.catalog is None:
            raise InvalidOperation("No catalog configured")
        exercises = self.catalog.fetch_exercises(category_id)
        return self.start(exercises, category_id=category_id)

    def restart(self) -> Session:
        """
        Discard the current session and start over.

        Category sessions re-fetch from the catalog so edits made since the
        first start are picked up.  Sessions started from a plain list
        restart from that list in its original order.
        """
        with self._lock:
            category_id = self.session.category_id
            if category_id is not None and self.catalog is not None:
                return self.start_category(category_id)
            return self.start(self._source, category_id=category_id)

    def complete(self) -> None:
        """Mark the session finished.  A second call is a no-op."""
        with self._lock:
            session = self.session
            if session.completed:
                return
            self.timer.stop()
            session.active = False
            session.completed = True
            session.ended_at = utc_now()
            logger.debug("Completed session %s after %ds", session.session_id, session.elapsed_seconds)
            notify_gateway(self.gateway, "on_session_completed", session)
            self._emit_state()

    def leave(self) -> Session | None:
        """
        Abandon the session: stop the timer synchronously and drop state.

        Elapsed time already committed stays on the returned session; nothing
        is completed or emitted.
        """
        with self._lock:
            self.timer.stop()
            session, self._session = self._session, None
            return session

    def add_elapsed(self, seconds: int) -> None:
        """Add stretch time.  Ignored when the session is inactive or seconds < 1."""
        with self._lock:
            if self._commit_elapsed(seconds):
                self._emit_state()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next(self) -> NavigationResult:
        """
        Move forward, skipping restricted exercises the policy denies.

        The scan runs strictly forward and never wraps.  Reaching the last
        exercise does not complete the session, and a completed session
        stays where it ended.
        """
        with self._lock:
            if self.session.completed:
                return AtEnd()
            result = self._advance()
            if result.moved:
                self._rearm_if_live()
                self._emit_state()
            return result

    def previous(self) -> NavigationResult:
        """Move back exactly one position.  Never gated."""
        with self._lock:
            session = self.session
            if session.completed or not session.can_go_previous:
                return AtStart()
            session.index -= 1
            session.visited_ids.append(session.current_exercise.exercise_id)
            logger.debug("Session %s moved back to %d", session.session_id, session.index)
            notify_gateway(self.gateway, "on_progress", session)
            self._rearm_if_live()
            self._emit_state()
            return Advanced(to=session.index)

    def shuffle(self) -> None:
        """
        Uniformly permute the whole snapshot and reset position and elapsed time.

        A completed session is left untouched.
        """
        with self._lock:
            session = self.session
            if session.completed:
                return
            order = list(session.exercises)
            self.rng.shuffle(order)
            session.exercises = tuple(order)
            session.index = 0
            session.elapsed_seconds = 0
            session.visited = 0
            session.visited_ids = [session.current_exercise.exercise_id]
            logger.debug("Shuffled session %s", session.session_id)
            notify_gateway(self.gateway, "on_progress", session)
            self._rearm_if_live()
            self._emit_state()

    # ------------------------------------------------------------------
    # Timer orchestration
    # ------------------------------------------------------------------

    def begin_exercise(self) -> bool:
        """(Re)start the countdown for the current exercise from its full duration."""
        with self._lock:
            session = self.session
            if not session.active:
                return False
            self.timer.start(session.current_exercise.duration_seconds)
            self._emit_state()
            return True

    def pause(self) -> bool:
        with self._lock:
            changed = self.timer.pause()
            if changed:
                self._emit_state()
            return changed

    def resume(self) -> bool:
        with self._lock:
            changed = self.timer.resume()
            if changed:
                self._emit_state()
            return changed

    def toggle(self) -> bool:
        """Play/pause button: pause if running, resume if paused, else begin."""
        with self._lock:
            status = self.timer.status
            if status is TimerStatus.RUNNING:
                return self.pause()
            if status is TimerStatus.PAUSED:
                return self.resume()
            return self.begin_exercise()

    def tick(self) -> TickOutcome:
        """
        Deliver one elapsed second.

        Commits one second of stretch time and, on expiry, resolves the
        auto-advance (including the access check) before returning, so the
        next tick always sees a settled position.
        """
        with self._lock:
            if self._session is None:
                return TickOutcome.IGNORED
            outcome = self.timer.tick()
            if outcome is TickOutcome.IGNORED:
                return outcome

            self._commit_elapsed(1)
            state = self.state()
            for listener in list(self._listeners):
                listener.on_tick(state)

            if outcome is TickOutcome.EXPIRED:
                self._handle_expiry()
            return outcome

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _advance(self) -> NavigationResult:
        session = self.session
        if not session.can_go_next:
            return AtEnd()

        for candidate in range(session.index + 1, session.total):
            exercise = session.exercises[candidate]
            if exercise.restricted and not self.access_policy.can_access(exercise):
                continue
            session.index = candidate
            session.visited += 1
            session.visited_ids.append(exercise.exercise_id)
            logger.debug("Session %s advanced to %d", session.session_id, candidate)
            notify_gateway(self.gateway, "on_progress", session)
            return Advanced(to=candidate)

        # Every exercise ahead was denied, so the next one is the first blocked.
        first_denied = session.exercises[session.index + 1]
        logger.debug(
            "Session %s blocked at %d by restricted '%s'",
            session.session_id, session.index, first_denied.exercise_id,
        )
        for listener in list(self._listeners):
            listener.on_gating_required(first_denied)
        return NoFreeExerciseAhead(blocked=first_denied)

    def _handle_expiry(self) -> None:
        state = self.state()
        for listener in list(self._listeners):
            listener.on_expired(state)
        if not self.settings.auto_advance:
            return

        result = self._advance()
        if isinstance(result, Advanced):
            self.timer.start(self.session.current_exercise.duration_seconds)
            self._emit_state()
        elif isinstance(result, AtEnd) and self.settings.auto_complete:
            self.complete()

    def _rearm_if_live(self) -> None:
        """Restart the countdown for the new exercise if one was in progress."""
        if self.timer.status in (TimerStatus.RUNNING, TimerStatus.PAUSED):
            self.timer.start(self.session.current_exercise.duration_seconds)

    def _commit_elapsed(self, seconds: int) -> bool:
        session = self._session
        if session is None or not session.active or seconds < 1:
            logger.debug("Ignoring add_elapsed(%s) outside an active session", seconds)
            return False
        session.elapsed_seconds += seconds
        return True

    def _emit_state(self) -> None:
        if not self._listeners or self._session is None:
            return
        state = SessionState.capture(self._session, self.timer.snapshot())
        for listener in list(self._listeners):
            listener.on_state(state)
