"""
Base types for exercise catalogs.

A catalog supplies the ordered exercise list for one category.  The
controller only needs fetch_exercises(); list_categories() serves the CLI.
"""

from dataclasses import dataclass
from typing import Protocol, Sequence

from ..models import Exercise


@dataclass(frozen=True)
class Category:
    """A body area grouping one session's exercises."""

    category_id: str     # e.g. "neck", "lower_back"
    name: str            # e.g. "Lower Back"
    image: str | None = None


class CatalogProvider(Protocol):
    """Source of exercise sequences, keyed by category id."""

    def fetch_exercises(self, category_id: str) -> Sequence[Exercise]:
        """
        Return the category's exercises ordered by position.

        Raises:
            CatalogUnavailable: If the category cannot be supplied
        """
        ...

    def list_categories(self) -> list[Category]: ...
