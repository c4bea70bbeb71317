"""Session commands: run, history, clear-history, and the terminal listener."""

import dataclasses
import json
from typing import Annotated, Optional

import typer

from ...core.access import AccessPolicy, Entitlement, EntitlementPolicy
from ...core.clock import MonotonicTicker, drive
from ...core.config_loader import load_settings
from ...core.controller import SessionController
from ...core.events import SessionListener
from ...core.metrics import session_summary
from ...core.models import AtEnd, AtStart, Exercise, SessionState, TimerStatus
from ...errors import StretchSessionError
from ...io.serializers import ValidationError
from .. import views
from ..app import LogPathOption, app, get_catalog, get_log

MENU_HINT = (
    "[dim][Enter] start/resume  n next  p previous  s shuffle  "
    "r restart  c complete  q quit[/dim]"
)


class TerminalListener(SessionListener):
    """Prints exercise headers, the countdown line and gating notices."""

    def __init__(self) -> None:
        self._shown: tuple[str, int, str] | None = None

    def on_state(self, state: SessionState) -> None:
        key = (state.session_id, state.index, state.exercise.exercise_id)
        if key != self._shown:
            self._shown = key
            views.print_exercise(state)

    def on_tick(self, state: SessionState) -> None:
        views.print_tick(state)

    def on_expired(self, state: SessionState) -> None:
        views.console.print()
        views.print_success(f"Done: {state.exercise.name}")

    def on_gating_required(self, exercise: Exercise) -> None:
        views.print_gating(exercise)


def _run_countdown(controller: SessionController, ticker: MonotonicTicker) -> None:
    """Run the countdown in the foreground; Ctrl-C pauses."""
    ticker.reset()
    try:
        drive(controller, ticker)
    except KeyboardInterrupt:
        controller.pause()
        views.console.print()
        views.print_info("Paused.")


def _build_policy(premium: bool) -> AccessPolicy:
    if premium:
        return EntitlementPolicy(Entitlement(kind="lifetime"))
    return EntitlementPolicy()


@app.command("run")
def run(
    category_id: Annotated[
        str,
        typer.Argument(help="Category ID (see 'categories')"),
    ],
    premium: Annotated[
        bool,
        typer.Option("--premium", help="Unlock restricted exercises"),
    ] = False,
    shuffle: Annotated[
        bool,
        typer.Option("--shuffle", help="Shuffle the exercise order before starting"),
    ] = False,
    auto_advance: Annotated[
        Optional[bool],
        typer.Option(
            "--auto-advance/--no-auto-advance",
            help="Move on automatically when the countdown ends (default from config)",
        ),
    ] = None,
    auto_complete: Annotated[
        Optional[bool],
        typer.Option(
            "--auto-complete/--no-auto-complete",
            help="Complete the session when the last countdown ends (default from config)",
        ),
    ] = None,
    tick_interval: Annotated[
        float,
        typer.Option("--tick-interval", hidden=True, help="Seconds per countdown tick"),
    ] = 1.0,
    log_path: LogPathOption = None,
) -> None:
    """
    Run a guided session through one category.
    """
    settings = load_settings()
    if auto_advance is not None:
        settings = dataclasses.replace(settings, auto_advance=auto_advance)
    if auto_complete is not None:
        settings = dataclasses.replace(settings, auto_complete=auto_complete)

    controller = SessionController(
        catalog=get_catalog(settings),
        access_policy=_build_policy(premium),
        gateway=get_log(log_path),
        settings=settings,
    )
    controller.subscribe(TerminalListener())

    try:
        controller.start_category(category_id)
    except StretchSessionError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if shuffle:
        controller.shuffle()

    ticker = MonotonicTicker(interval=tick_interval)

    while True:
        session = controller.session
        if session.completed:
            views.print_summary(session)
            return

        views.console.print(MENU_HINT)
        try:
            choice = views.console.input("> ").strip().lower()
        except EOFError:
            choice = "q"

        if choice == "":
            if controller.timer.status is TimerStatus.PAUSED:
                controller.resume()
            elif not controller.begin_exercise():
                continue
            _run_countdown(controller, ticker)
        elif choice == "n":
            result = controller.next()
            if isinstance(result, AtEnd):
                views.print_info("This is the last exercise. Press c to complete.")
        elif choice == "p":
            if isinstance(controller.previous(), AtStart):
                views.print_info("Already at the first exercise.")
        elif choice == "s":
            controller.shuffle()
            views.print_info("Shuffled.")
        elif choice == "r":
            try:
                controller.restart()
            except StretchSessionError as e:
                views.print_error(str(e))
                continue
            views.print_info("Restarted.")
        elif choice == "c":
            controller.complete()
        elif choice == "q":
            left = controller.leave()
            if left is not None:
                views.print_summary(left)
            return
        else:
            views.print_error(f"Unknown choice: {choice}")


@app.command("history")
def history(
    log_path: LogPathOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", min=1, help="Limit number of sessions to show"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
) -> None:
    """
    Display completed sessions as a table.
    """
    log = get_log(log_path)

    try:
        sessions = log.completed_sessions()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if limit is not None:
        sessions = sessions[-limit:]

    if json_out:
        output = []
        for s in sessions:
            summary = session_summary(s)
            summary["started_at"] = s.started_at.isoformat()
            summary["elapsed_seconds"] = s.elapsed_seconds
            output.append(summary)
        print(json.dumps(output, indent=2))
        return

    views.print_history(sessions)


@app.command("clear-history")
def clear_history(
    log_path: LogPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Delete every recorded session event.
    """
    log = get_log(log_path)
    if not log.exists():
        views.print_info("Nothing to clear.")
        return

    if not force and not views.confirm_action("Clear the whole session log?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    log.clear()
    views.print_success(f"Cleared {log.log_path}")
