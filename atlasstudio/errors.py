"""
Error taxonomy for the auth API.

Services raise these; a single exception handler in main.py turns them
into JSON responses of the form {"message": ...}.
"""
from fastapi import status


class AuthError(Exception):
    """Base class for errors that terminate a request with a known status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UnauthorizedError(AuthError):
    """No session, or the session/credentials are invalid."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class NotFoundError(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AuthError):
    """Uniqueness violation, e.g. an email already registered."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"
