"""
CLI entry point using Typer.

Provides commands for guided stretching:
- categories: List stretch categories
- show: Show a category's exercises
- run: Run a guided, timed session
- history: Display completed sessions
- clear-history: Delete the session log
"""

from typing import Annotated

import typer

from ..core.config_loader import load_settings
from ..logging_config import setup_logging
from .app import app
from .commands import catalog, session  # noqa: F401  (registers commands)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Guided, timed stretching sessions from the terminal.
    """
    setup_logging("DEBUG" if verbose else load_settings().log_level)


if __name__ == "__main__":
    app()
