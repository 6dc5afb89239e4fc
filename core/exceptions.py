"""
Domain exceptions raised by the service layer.

The web layer maps each class to an HTTP status in
``backend.app.error_handlers``; nothing below this module knows about HTTP.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validation import Violation


class DomainError(Exception):
    """Base class for all expected failures of a profile operation."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(DomainError):
    """Missing, malformed or unverifiable identity token."""

    default_message = "Invalid authentication credentials"


class ValidationFailed(DomainError):
    """One or more required fields were missing or empty."""

    default_message = "Validation error"

    def __init__(self, violations: list[Violation]):
        super().__init__()
        self.violations = violations

    def to_list(self) -> list[dict]:
        return [violation.to_dict() for violation in self.violations]


class NotFound(DomainError):
    default_message = "Not found"


class ProfileNotFound(NotFound):
    default_message = "Profile not found"


class ExperienceNotFound(NotFound):
    default_message = "Experience not found"


class StoreFailure(DomainError):
    """
    Persistence error not otherwise classified.

    The original exception is chained as ``__cause__`` for logging; its text
    never reaches the caller.
    """

    default_message = "Server Error"

    def __init__(self, operation: str):
        super().__init__()
        self.operation = operation


__all__ = [
    "DomainError",
    "Unauthorized",
    "ValidationFailed",
    "NotFound",
    "ProfileNotFound",
    "ExperienceNotFound",
    "StoreFailure",
]
