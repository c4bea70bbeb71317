"""
Exception taxonomy for stretch-session.

A forward move blocked by access gating is a navigation result
(core.models.NoFreeExerciseAhead), not an exception.
"""


class StretchSessionError(Exception):
    """Base class for all stretch-session errors."""

    pass


class EmptyCatalogError(StretchSessionError):
    """Raised when a session is started with no exercises."""

    pass


class CatalogUnavailable(StretchSessionError):
    """Raised by a catalog provider that cannot supply a category."""

    def __init__(self, category_id: str, reason: str = "not found"):
        self.category_id = category_id
        self.reason = reason
        super().__init__(f"Category '{category_id}' unavailable: {reason}")


class InvalidOperation(StretchSessionError):
    """Raised for session operations called before any session was started."""

    pass
