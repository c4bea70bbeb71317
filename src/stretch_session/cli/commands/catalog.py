"""Catalog commands: categories, show."""

from typing import Annotated

import typer

from ...core.config_loader import load_settings
from ...errors import CatalogUnavailable
from ...io.serializers import ValidationError
from .. import views
from ..app import LogPathOption, app, get_catalog, get_log


@app.command("categories")
def categories() -> None:
    """
    List the available stretch categories.
    """
    catalog = get_catalog(load_settings())
    rows = [(c, tuple(catalog.fetch_exercises(c.category_id))) for c in catalog.list_categories()]
    if not rows:
        views.print_warning("No categories found.")
        raise typer.Exit(1)
    views.console.print(views.format_category_table(rows))


@app.command("show")
def show(
    category_id: Annotated[
        str,
        typer.Argument(help="Category ID (see 'categories')"),
    ],
    log_path: LogPathOption = None,
) -> None:
    """
    Show the exercises of one category, with how often each was used.
    """
    catalog = get_catalog(load_settings())
    try:
        category = catalog.get_category(category_id)
        exercises = tuple(catalog.fetch_exercises(category_id))
    except CatalogUnavailable as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        usage = get_log(log_path).usage_counts()
    except ValidationError as e:
        views.print_warning(str(e))
        usage = None

    views.console.print(views.format_exercise_table(category.name, exercises, usage))
