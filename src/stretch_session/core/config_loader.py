"""
YAML → SessionSettings loader.

Loads defaults from defaults.yaml (bundled with the package) and merges
user overrides from ~/.stretch-session/config.yaml.  The base directory can
be moved with the STRETCH_SESSION_HOME environment variable.

Usage:
    from stretch_session.core.config_loader import load_settings
    settings = load_settings()

If the bundled YAML cannot be parsed, the dataclass defaults from config.py
apply.  If the user file has parse errors, a warning is issued and the file
is ignored.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from .config import APP_DIR_NAME, HOME_ENV_VAR, SETTINGS_FILE_NAME, SessionSettings

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; return {} if the file is missing or not a mapping."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_app_dir() -> Path:
    """Return the per-user data directory (not created)."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / APP_DIR_NAME


def get_bundled_defaults_path() -> Path:
    """Return the path to the bundled defaults.yaml."""
    return Path(__file__).parent.parent / "defaults.yaml"


def get_user_settings_path() -> Path:
    return get_app_dir() / SETTINGS_FILE_NAME


def load_config_dict() -> dict[str, Any]:
    """
    Load and merge raw configuration.

    Load order (later overrides earlier):
    1. Bundled src/stretch_session/defaults.yaml
    2. User override at <app dir>/config.yaml
    """
    config: dict[str, Any] = {}
    try:
        config = load_yaml_file(get_bundled_defaults_path())
    except yaml.YAMLError as exc:
        warnings.warn(f"stretch-session: bundled defaults unreadable ({exc})", stacklevel=2)

    user_path = get_user_settings_path()
    try:
        user_cfg = load_yaml_file(user_path)
    except (yaml.YAMLError, OSError) as exc:
        warnings.warn(
            f"stretch-session: ignoring {user_path} ({exc})",
            stacklevel=2,
        )
        user_cfg = {}
    if user_cfg:
        config = deep_merge(config, user_cfg)
    return config


def settings_from_dict(data: dict[str, Any]) -> SessionSettings:
    """Build SessionSettings from a merged config dict; absent keys keep defaults."""
    session = data.get("session") or {}
    logging_cfg = data.get("logging") or {}
    defaults = SessionSettings()
    return SessionSettings(
        auto_advance=bool(session.get("auto_advance", defaults.auto_advance)),
        auto_complete=bool(session.get("auto_complete", defaults.auto_complete)),
        free_per_category=int(session.get("free_per_category", defaults.free_per_category)),
        log_level=str(logging_cfg.get("level", defaults.log_level)).upper(),
    )


def load_settings() -> SessionSettings:
    """Return SessionSettings from bundled defaults merged with user overrides."""
    return settings_from_dict(load_config_dict())
