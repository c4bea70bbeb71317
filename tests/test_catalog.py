"""
Tests for the YAML catalog, exercise validation and settings loading.
"""

import pytest

from stretch_session.core.catalog import InMemoryCatalog, YamlCatalog
from stretch_session.core.catalog.loader import category_from_dict, load_categories_from_yaml
from stretch_session.core.config import SessionSettings
from stretch_session.core.config_loader import deep_merge, load_settings
from stretch_session.core.models import Exercise
from stretch_session.errors import CatalogUnavailable


def _write(path, text: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


MINI_CATEGORY = """\
category_id: wrists
name: Wrists
exercises:
  - id: wrist-flexor
    name: Wrist Flexor Stretch
    instruction: Extend the arm and pull the fingers back.
    duration: 20
  - id: wrist-extensor
    name: Wrist Extensor Stretch
    instruction: Extend the arm and press the back of the hand down.
    duration: 20
  - id: wrist-prayer
    name: Prayer Stretch
    instruction: Press palms together and lower the hands.
    duration: 25
"""


class TestBundledCatalog:

    def test_lists_bundled_categories_by_name(self):
        names = [c.name for c in YamlCatalog().list_categories()]
        assert names == ["Hamstrings", "Lower Back", "Neck", "Shoulders"]

    def test_neck_order_and_durations(self):
        exercises = YamlCatalog().fetch_exercises("neck")
        assert [e.exercise_id for e in exercises] == [
            "neck-side-tilt",
            "neck-chin-tuck",
            "neck-levator",
            "neck-scm",
        ]
        assert exercises[0].duration_seconds == 30
        assert all(e.category_id == "neck" for e in exercises)

    def test_only_first_exercise_is_free(self):
        exercises = YamlCatalog().fetch_exercises("shoulders")
        assert [e.restricted for e in exercises] == [False, True, True, True, True]

    def test_free_per_category_setting(self):
        exercises = YamlCatalog(free_per_category=2).fetch_exercises("neck")
        assert [e.restricted for e in exercises] == [False, False, True, True]

    def test_unknown_category(self):
        with pytest.raises(CatalogUnavailable) as exc_info:
            YamlCatalog().fetch_exercises("elbows")
        assert exc_info.value.category_id == "elbows"

    def test_get_category(self):
        category = YamlCatalog().get_category("lower_back")
        assert category.name == "Lower Back"


class TestUserOverrides:

    def test_user_file_merges_over_bundled(self, app_home):
        _write(app_home / "categories" / "neck.yaml", "name: Neck Relief\n")
        catalog = YamlCatalog()
        assert catalog.get_category("neck").name == "Neck Relief"
        assert len(catalog.fetch_exercises("neck")) == 4

    def test_user_file_adds_category(self, app_home):
        _write(app_home / "categories" / "wrists.yaml", MINI_CATEGORY)
        catalog = YamlCatalog()
        assert "wrists" in [c.category_id for c in catalog.list_categories()]
        assert len(catalog.fetch_exercises("wrists")) == 3

    def test_edits_are_seen_on_next_fetch(self, tmp_path):
        bundled = tmp_path / "bundled"
        path = _write(bundled / "wrists.yaml", MINI_CATEGORY)
        catalog = YamlCatalog(bundled_dir=bundled)
        assert len(catalog.fetch_exercises("wrists")) == 3

        path.write_text(MINI_CATEGORY.replace("  - id: wrist-prayer", "  - id: wrist-gone", 1))
        assert catalog.fetch_exercises("wrists")[2].exercise_id == "wrist-gone"

    def test_broken_file_is_skipped_with_warning(self, tmp_path):
        bundled = tmp_path / "bundled"
        _write(bundled / "wrists.yaml", MINI_CATEGORY)
        _write(bundled / "broken.yaml", "category_id: broken\nexercises: [unclosed\n")

        with pytest.warns(UserWarning, match="skipping category 'broken'"):
            loaded = load_categories_from_yaml(bundled_dir=bundled)

        assert list(loaded) == ["wrists"]

    def test_invalid_exercise_skips_category(self, tmp_path):
        bundled = tmp_path / "bundled"
        _write(bundled / "bad.yaml", MINI_CATEGORY.replace("duration: 20", "duration: 0", 1))

        with pytest.warns(UserWarning):
            loaded = load_categories_from_yaml(bundled_dir=bundled)

        assert loaded == {}


class TestCategoryFromDict:

    def _raw(self, **overrides):
        raw = {
            "category_id": "hips",
            "name": "Hips",
            "exercises": [
                {"id": "a", "name": "A", "instruction": "x", "duration": 10},
                {"id": "b", "name": "B", "instruction": "y", "duration": 15},
            ],
        }
        raw.update(overrides)
        return raw

    def test_missing_category_fields(self):
        with pytest.raises(ValueError, match="missing fields"):
            category_from_dict({"name": "Hips"})

    def test_missing_exercise_fields(self):
        raw = self._raw(exercises=[{"id": "a", "name": "A"}])
        with pytest.raises(ValueError, match="exercise #1"):
            category_from_dict(raw)

    def test_exercises_must_be_a_list(self):
        with pytest.raises(ValueError):
            category_from_dict(self._raw(exercises={"id": "a"}))

    def test_explicit_positions_sort(self):
        raw = self._raw()
        raw["exercises"][0]["position"] = 5
        _, exercises = category_from_dict(raw)
        assert [e.exercise_id for e in exercises] == ["b", "a"]

    def test_explicit_restricted_wins(self):
        raw = self._raw()
        raw["exercises"][1]["restricted"] = False
        _, exercises = category_from_dict(raw)
        assert not any(e.restricted for e in exercises)

    def test_free_tier_follows_position_not_file_order(self):
        raw = self._raw()
        raw["exercises"][0]["position"] = 2
        raw["exercises"][1]["position"] = 1
        _, exercises = category_from_dict(raw)
        assert [(e.exercise_id, e.position, e.restricted) for e in exercises] == [
            ("b", 1, False),
            ("a", 2, True),
        ]

    def test_explicit_restricted_wins_over_rank(self):
        raw = self._raw()
        raw["exercises"][0]["position"] = 2
        raw["exercises"][1]["position"] = 1
        raw["exercises"][1]["restricted"] = True
        _, exercises = category_from_dict(raw, free_per_category=1)
        assert [e.restricted for e in exercises] == [True, True]

    def test_exercise_entries_must_be_mappings(self):
        with pytest.raises(ValueError, match="mapping"):
            category_from_dict(self._raw(exercises=["a"]))


class TestExerciseValidation:

    def _make(self, **overrides):
        fields = dict(
            exercise_id="a",
            position=1,
            name="A",
            instruction="Hold.",
            duration_seconds=30,
        )
        fields.update(overrides)
        return Exercise(**fields)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"exercise_id": ""},
            {"position": 0},
            {"name": ""},
            {"duration_seconds": 0},
        ],
    )
    def test_rejects_invalid(self, overrides):
        with pytest.raises(ValueError):
            self._make(**overrides)

    def test_difficulty_is_clamped(self):
        assert self._make(difficulty=9).difficulty == 5
        assert self._make(difficulty=-1).difficulty == 1


class TestInMemoryCatalog:

    def test_fetch_and_remove(self):
        ex = Exercise("a", 1, "A", "Hold.", 10)
        catalog = InMemoryCatalog({"lower_back": [ex]})
        assert catalog.fetch_exercises("lower_back") == (ex,)
        assert [c.name for c in catalog.list_categories()] == ["Lower Back"]

        catalog.remove("lower_back")
        with pytest.raises(CatalogUnavailable):
            catalog.fetch_exercises("lower_back")


class TestSettings:

    def test_bundled_defaults(self):
        assert load_settings() == SessionSettings()

    def test_user_override(self, app_home):
        _write(
            app_home / "config.yaml",
            "session:\n  auto_advance: false\n  free_per_category: 2\nlogging:\n  level: debug\n",
        )
        settings = load_settings()
        assert settings.auto_advance is False
        assert settings.auto_complete is False
        assert settings.free_per_category == 2
        assert settings.log_level == "DEBUG"

    def test_broken_user_config_is_ignored(self, app_home):
        _write(app_home / "config.yaml", "session: [unclosed\n")
        with pytest.warns(UserWarning, match="ignoring"):
            settings = load_settings()
        assert settings == SessionSettings()

    def test_negative_free_per_category_rejected(self):
        with pytest.raises(ValueError):
            SessionSettings(free_per_category=-1)

    def test_deep_merge_is_non_destructive(self):
        base = {"session": {"auto_advance": True, "auto_complete": False}}
        merged = deep_merge(base, {"session": {"auto_complete": True}})
        assert merged == {"session": {"auto_advance": True, "auto_complete": True}}
        assert base["session"]["auto_complete"] is False
