"""Domain exceptions for the Task Rooms backend.

Services raise these; the API layer turns them into JSON responses with a
``message`` field (see ``app.api.errors``). Every class carries the HTTP
status it maps to so handlers never have to guess.
"""

from typing import Any


class AppError(Exception):
    """Base exception for all domain errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        body: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Validation failed"


class NotFoundError(AppError):
    """Referenced room, task or user does not exist."""

    status_code = 404
    default_message = "Not found"


class ForbiddenError(AppError):
    """Authenticated, but not permitted to perform the action."""

    status_code = 403
    default_message = "Access denied"


class ConflictError(AppError):
    """The request collides with existing state."""

    status_code = 409
    default_message = "Conflict"


class AlreadyMemberError(ConflictError):
    status_code = 400
    default_message = "You are already a member of this room"


class NotMemberError(AppError):
    status_code = 400
    default_message = "You are not a member of this room"


class OwnerCannotLeaveError(AppError):
    status_code = 400
    default_message = "Room owner cannot leave. Transfer ownership or delete the room."


class UnauthenticatedError(AppError):
    """Missing or invalid credentials."""

    status_code = 401
    default_message = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class InternalError(AppError):
    """Store failure or exhausted retry; details are never sent to the client."""

    status_code = 500
