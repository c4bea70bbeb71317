"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of catalog and session data.
"""

from collections import Counter

from rich.console import Console
from rich.table import Table

from ..core.catalog import Category
from ..core.metrics import format_clock, format_duration, format_exercise_time, session_summary
from ..core.models import Exercise, Session, SessionState

console = Console()


def format_category_table(rows: list[tuple[Category, tuple[Exercise, ...]]]) -> Table:
    """
    Create a Rich table listing categories.

    Args:
        rows: (category, exercises) pairs

    Returns:
        Rich Table object
    """
    table = Table(title="Categories")

    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Exercises", justify="right")
    table.add_column("Free", justify="right", style="green")
    table.add_column("Total time", justify="right")

    for category, exercises in rows:
        free = sum(1 for e in exercises if not e.restricted)
        total = sum(e.duration_seconds for e in exercises)
        table.add_row(
            category.category_id,
            category.name,
            str(len(exercises)),
            str(free),
            format_duration(total),
        )

    return table


def format_exercise_table(
    title: str,
    exercises: tuple[Exercise, ...],
    usage: Counter[str] | None = None,
) -> Table:
    """
    Create a Rich table of a category's exercises.

    Args:
        title: Table title (category name)
        exercises: Exercises in order
        usage: Optional completed-session counts per exercise id

    Returns:
        Rich Table object
    """
    table = Table(title=title)

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Name")
    table.add_column("Time", justify="right")
    table.add_column("Level", justify="right")
    table.add_column("Access")
    if usage is not None:
        table.add_column("Used", justify="right")

    for e in exercises:
        row = [
            str(e.position),
            e.name,
            format_exercise_time(e.duration_seconds),
            str(e.difficulty),
            "[yellow]premium[/yellow]" if e.restricted else "[green]free[/green]",
        ]
        if usage is not None:
            row.append(str(usage.get(e.exercise_id, 0)))
        table.add_row(*row)

    return table


def format_history_table(sessions: list[Session]) -> Table:
    """
    Create a Rich table of completed sessions.
    """
    table = Table(title="Session History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Started")
    table.add_column("Category")
    table.add_column("Reached", justify="right")
    table.add_column("Stretch time", justify="right")
    table.add_column("Duration", justify="right")

    for i, s in enumerate(sessions, 1):
        summary = session_summary(s)
        table.add_row(
            str(i),
            s.started_at.astimezone().strftime("%Y-%m-%d %H:%M"),
            s.category_id or "-",
            f"{summary['reached']}/{summary['exercises']}",
            summary["stretch_time"],
            summary["duration"],
        )

    return table


def print_history(sessions: list[Session]) -> None:
    if not sessions:
        console.print("[yellow]No completed sessions yet.[/yellow]")
        return
    console.print(format_history_table(sessions))


def print_exercise(state: SessionState) -> None:
    """Print the header block for the current exercise."""
    e = state.exercise
    console.print()
    console.print(
        f"[bold cyan]{state.index + 1}/{state.total}[/bold cyan]  "
        f"[bold]{e.name}[/bold]  [dim]({format_exercise_time(e.duration_seconds)})[/dim]"
    )
    console.print(f"  {e.instruction}")


def print_tick(state: SessionState) -> None:
    """Overwrite the countdown line in place."""
    console.print(f"  [bold]{format_clock(state.timer.remaining):>5}[/bold]", end="\r")


def print_gating(exercise: Exercise) -> None:
    console.print()
    console.print(
        f"[yellow]'{exercise.name}' and the rest of this category need premium access.[/yellow]"
    )
    console.print("[dim]Run with --premium to unlock every exercise.[/dim]")


def print_summary(session: Session) -> None:
    """Print the end-of-session block."""
    summary = session_summary(session)
    status = "[green]Completed[/green]" if session.completed else "[yellow]Left early[/yellow]"
    console.print()
    console.print(f"{status}: reached {summary['reached']}/{summary['exercises']} exercises")
    console.print(f"  Stretch time: {summary['stretch_time']}  (session {summary['duration']})")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
