"""Service-level errors raised before or around content store calls."""

from __future__ import annotations


class ValidationError(ValueError):
    """Visitor or operator input was rejected; the message is safe to show.

    ``errors`` maps field names to messages when the form reports them per field.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 422,
        errors: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors


class NotFoundError(LookupError):
    """The record addressed by id is not in its collection."""


class InvalidTransitionError(ValueError):
    """A status change is not allowed from the record's current status."""
