"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.catalog import YamlCatalog
from ..core.config import SessionSettings
from ..io.session_log import SessionLog, get_default_log_path

# Shared --log-path option type used across all commands
LogPathOption = Annotated[
    Optional[Path],
    typer.Option("--log-path", "-p", help="Path to the session log JSONL file"),
]

app = typer.Typer(
    name="stretch-session",
    help="Guided, timed stretching sessions from the terminal.",
    no_args_is_help=True,
)


def get_log(log_path: Path | None) -> SessionLog:
    """Get the session log from path or the default location."""
    if log_path is None:
        log_path = get_default_log_path()
    return SessionLog(log_path)


def get_catalog(settings: SessionSettings) -> YamlCatalog:
    """Catalog of bundled and user categories, honouring the free-tier size."""
    return YamlCatalog(free_per_category=settings.free_per_category)
