"""
Access policies: decide whether a restricted exercise may be opened.

The controller asks the policy synchronously at the moment of navigation
and never caches the answer, so an entitlement that changes between two
calls takes effect on the next call.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Literal, Protocol

from .config import WEEKLY_ENTITLEMENT_DAYS
from .models import Exercise, utc_now

EntitlementKind = Literal["lifetime", "weekly"]


class AccessPolicy(Protocol):
    """Anything with a pure can_access(exercise) query."""

    def can_access(self, exercise: Exercise) -> bool: ...


class AllowAll:
    """Grants every exercise (premium user, or gating disabled)."""

    def can_access(self, exercise: Exercise) -> bool:
        return True


class FreeTierOnly:
    """Grants only unrestricted exercises."""

    def can_access(self, exercise: Exercise) -> bool:
        return not exercise.restricted


@dataclass
class Entitlement:
    """
    Premium entitlement as reported by an external store.

    A lifetime entitlement never expires.  A weekly one is valid until
    ``expires_at``; when ``expires_at`` is missing it is computed from
    ``granted_at`` + 7 days.
    """

    kind: EntitlementKind
    product_ids: frozenset[str] = field(default_factory=frozenset)
    granted_at: datetime = field(default_factory=utc_now)
    expires_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.kind not in ("lifetime", "weekly"):
            raise ValueError(f"Invalid entitlement kind: {self.kind}")
        if self.kind == "weekly" and self.expires_at is None:
            self.expires_at = self.granted_at + timedelta(days=WEEKLY_ENTITLEMENT_DAYS)

    def is_valid(self, now: datetime) -> bool:
        if self.kind == "lifetime" or self.expires_at is None:
            return True
        return now < self.expires_at


class EntitlementPolicy:
    """
    Grants restricted exercises while an entitlement is valid.

    ``entitlement`` may be replaced at any time (e.g. after a purchase or a
    revocation sync); ``clock`` is injectable for tests.
    """

    def __init__(
        self,
        entitlement: Entitlement | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.entitlement = entitlement
        self._clock = clock

    @property
    def has_premium_access(self) -> bool:
        return self.entitlement is not None and self.entitlement.is_valid(self._clock())

    def grant(self, entitlement: Entitlement) -> None:
        self.entitlement = entitlement

    def revoke(self) -> None:
        self.entitlement = None

    def can_access(self, exercise: Exercise) -> bool:
        if not exercise.restricted:
            return True
        return self.has_premium_access
