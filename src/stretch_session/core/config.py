"""
Configuration constants for the session engine.

Tunable defaults live here; user-level overrides are read by
config_loader.load_settings().
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# TIMER
# =============================================================================

TICK_INTERVAL_SECONDS: Final[float] = 1.0  # One countdown tick per second
MIN_EXERCISE_SECONDS: Final[int] = 1

# =============================================================================
# CATALOG
# =============================================================================

DEFAULT_FREE_PER_CATEGORY: Final[int] = 1  # First N exercises of a category are free
DIFFICULTY_MIN: Final[int] = 1
DIFFICULTY_MAX: Final[int] = 5

# =============================================================================
# FILES
# =============================================================================

APP_DIR_NAME: Final[str] = ".stretch-session"
HOME_ENV_VAR: Final[str] = "STRETCH_SESSION_HOME"
SETTINGS_FILE_NAME: Final[str] = "config.yaml"
SESSION_LOG_FILE_NAME: Final[str] = "sessions.jsonl"

# =============================================================================
# ENTITLEMENTS
# =============================================================================

WEEKLY_ENTITLEMENT_DAYS: Final[int] = 7


@dataclass(frozen=True)
class SessionSettings:
    """
    Behaviour switches for a SessionController.

    auto_complete: when the timer expires on the last exercise, complete
    the session instead of waiting for an explicit complete() call.
    """

    auto_advance: bool = True
    auto_complete: bool = False
    free_per_category: int = DEFAULT_FREE_PER_CATEGORY
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.free_per_category < 0:
            raise ValueError("free_per_category must be non-negative")
