"""
YAML → Category / Exercise loader.

Loads one category per YAML file from the bundled
``src/stretch_session/categories/`` directory.  Each file (e.g. neck.yaml)
holds the category header and an ordered ``exercises`` list.

User overrides: place matching files in ``~/.stretch-session/categories/``.
A user file is deep-merged over the bundled one, so only changed keys need
to be listed (an ``exercises`` list replaces the bundled list wholesale).
A user file with no bundled counterpart adds a new category.

When an exercise omits ``restricted``, the first ``free_per_category``
exercises (by position) are free and the rest are restricted.
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from ..config import DEFAULT_FREE_PER_CATEGORY
from ..config_loader import deep_merge, get_app_dir, load_yaml_file
from ..models import Exercise
from .base import Category

_REQUIRED_CATEGORY_FIELDS: frozenset[str] = frozenset({"category_id", "name", "exercises"})

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset({"id", "name", "instruction", "duration"})


def _exercise_from_dict(d: dict, position: int, category_id: str, restricted: bool) -> Exercise:
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"exercise #{position} missing fields: {sorted(missing)}")
    return Exercise(
        exercise_id=str(d["id"]),
        position=position,
        name=str(d["name"]),
        instruction=str(d["instruction"]).strip(),
        duration_seconds=int(d["duration"]),
        restricted=bool(d.get("restricted", restricted)),
        category_id=category_id,
        difficulty=int(d.get("difficulty", 1)),
        image=d.get("image"),
    )


def category_from_dict(
    d: dict,
    free_per_category: int = DEFAULT_FREE_PER_CATEGORY,
) -> tuple[Category, tuple[Exercise, ...]]:
    """Convert a raw dict (from YAML) to a Category and its ordered exercises.

    Raises ValueError if any required field is absent or an exercise is invalid.
    """
    missing = _REQUIRED_CATEGORY_FIELDS - set(d)
    if missing:
        raise ValueError(f"category missing fields: {sorted(missing)}")

    category = Category(
        category_id=str(d["category_id"]),
        name=str(d["name"]),
        image=d.get("image"),
    )

    raw_exercises = d["exercises"] or []
    if not isinstance(raw_exercises, list):
        raise ValueError("exercises must be a list")

    # Free-tier defaults follow position order, not file order.
    ranked = []
    for i, raw in enumerate(raw_exercises, 1):
        if not isinstance(raw, dict):
            raise ValueError(f"exercise #{i} must be a mapping")
        ranked.append((int(raw.get("position", i)), i, raw))
    ranked.sort(key=lambda r: (r[0], r[1]))

    exercises = tuple(
        _exercise_from_dict(
            raw, position, category.category_id, restricted=(rank > free_per_category)
        )
        for rank, (position, _, raw) in enumerate(ranked, 1)
    )
    return category, exercises


def get_bundled_categories_dir() -> Path | None:
    """Return path to the bundled categories/ data directory, or None if not found."""
    # loader.py lives at src/stretch_session/core/catalog/loader.py
    # three levels up → src/stretch_session/
    candidate = Path(__file__).parent.parent.parent / "categories"
    return candidate if candidate.is_dir() else None


def get_user_categories_dir() -> Path | None:
    """Return <app dir>/categories/ if it exists, else None."""
    p = get_app_dir() / "categories"
    return p if p.is_dir() else None


def _category_sources(bundled_dir: Path | None, user_dir: Path | None) -> dict[str, list[Path]]:
    """Map file stem → [bundled path?, user path?] in merge order."""
    sources: dict[str, list[Path]] = {}
    for directory in (bundled_dir, user_dir):
        if directory is None:
            continue
        for p in sorted(directory.glob("*.yaml")):
            sources.setdefault(p.stem, []).append(p)
    return sources


def load_category_file(paths: list[Path], free_per_category: int) -> tuple[Category, tuple[Exercise, ...]]:
    """
    Load one category from its bundled file merged with an optional user file.

    Raises:
        ValueError: If the merged data is not a valid category
        yaml.YAMLError / OSError: If a file cannot be read
    """
    raw: dict = {}
    for path in paths:
        raw = deep_merge(raw, load_yaml_file(path))
    return category_from_dict(raw, free_per_category=free_per_category)


def load_categories_from_yaml(
    free_per_category: int = DEFAULT_FREE_PER_CATEGORY,
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> dict[str, tuple[Category, tuple[Exercise, ...]]]:
    """Return {category_id: (Category, exercises)} for every readable category file.

    Broken files are skipped with a warning rather than failing the whole
    catalog.
    """
    if bundled_dir is None:
        bundled_dir = get_bundled_categories_dir()
    if user_dir is None:
        user_dir = get_user_categories_dir()

    result: dict[str, tuple[Category, tuple[Exercise, ...]]] = {}
    for stem, paths in _category_sources(bundled_dir, user_dir).items():
        try:
            category, exercises = load_category_file(paths, free_per_category)
        except (ValueError, OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"stretch-session: skipping category '{stem}' ({exc})",
                stacklevel=2,
            )
            continue
        result[category.category_id] = (category, exercises)
    return result
