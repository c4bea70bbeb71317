"""
Catalog providers.

YamlCatalog re-reads its files on every fetch, so a restarted session
picks up catalog edits made after the first start.  InMemoryCatalog is the
substitute used by tests and by callers that load exercises themselves.
"""

from pathlib import Path
from typing import Iterable, Sequence

from ...errors import CatalogUnavailable
from ..config import DEFAULT_FREE_PER_CATEGORY
from ..models import Exercise
from .base import Category
from .loader import load_categories_from_yaml


class YamlCatalog:
    """Catalog backed by bundled (and user-override) category YAML files."""

    def __init__(
        self,
        free_per_category: int = DEFAULT_FREE_PER_CATEGORY,
        bundled_dir: Path | None = None,
        user_dir: Path | None = None,
    ):
        self.free_per_category = free_per_category
        self.bundled_dir = bundled_dir
        self.user_dir = user_dir

    def _load(self) -> dict[str, tuple[Category, tuple[Exercise, ...]]]:
        return load_categories_from_yaml(
            self.free_per_category,
            bundled_dir=self.bundled_dir,
            user_dir=self.user_dir,
        )

    def list_categories(self) -> list[Category]:
        return sorted((c for c, _ in self._load().values()), key=lambda c: c.name)

    def fetch_exercises(self, category_id: str) -> Sequence[Exercise]:
        loaded = self._load()
        if category_id not in loaded:
            raise CatalogUnavailable(category_id)
        return loaded[category_id][1]

    def get_category(self, category_id: str) -> Category:
        loaded = self._load()
        if category_id not in loaded:
            raise CatalogUnavailable(category_id)
        return loaded[category_id][0]


class InMemoryCatalog:
    """Catalog over exercise lists held in memory."""

    def __init__(self, categories: dict[str, Iterable[Exercise]] | None = None):
        self._exercises: dict[str, tuple[Exercise, ...]] = {}
        for category_id, exercises in (categories or {}).items():
            self.set_exercises(category_id, exercises)

    def set_exercises(self, category_id: str, exercises: Iterable[Exercise]) -> None:
        """Replace a category's exercises.  Running sessions keep their snapshot."""
        self._exercises[category_id] = tuple(exercises)

    def remove(self, category_id: str) -> None:
        self._exercises.pop(category_id, None)

    def list_categories(self) -> list[Category]:
        return [
            Category(category_id=cid, name=cid.replace("_", " ").title())
            for cid in sorted(self._exercises)
        ]

    def fetch_exercises(self, category_id: str) -> Sequence[Exercise]:
        if category_id not in self._exercises:
            raise CatalogUnavailable(category_id)
        return self._exercises[category_id]
