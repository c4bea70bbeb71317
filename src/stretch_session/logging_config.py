"""
Logging setup for the command-line front-end.

Library modules only create loggers; handlers are installed here, once,
by the CLI.  Output goes to stderr through Rich so it does not interleave
badly with the countdown display.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGING_CONFIGURED = False


def setup_logging(level: str | int = "WARNING") -> None:
    """
    Configure the ``stretch_session`` logger tree.

    Safe to call more than once: later calls only change the level.
    """
    global _LOGGING_CONFIGURED

    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING
        level = resolved

    root = logging.getLogger("stretch_session")
    root.setLevel(level)

    if _LOGGING_CONFIGURED:
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    _LOGGING_CONFIGURED = True
