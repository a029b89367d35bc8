"""Application error taxonomy.

Services raise these; the API layer turns them into ``{"error": ...}`` responses.
Errors flagged ``expose=False`` carry internal detail that is logged server-side
while the client only sees ``public_message``.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors with a known HTTP mapping."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Internal Server Error"
    expose: bool = False

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def client_message(self) -> str:
        """Message that is safe to return to the caller."""
        return self.message if self.expose else self.public_message


class ValidationError(AppError):
    """Malformed or missing request data."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid request"
    expose = True


class ConflictError(AppError):
    """A unique key (user email) is already taken."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Resource already exists"
    expose = True


class UnauthorizedError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Invalid authentication credentials"
    expose = True


class NotFoundError(AppError):
    """Missing resource, or a resource the caller does not own."""

    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not found"
    expose = True


class StorageError(AppError):
    """The blob store rejected or failed an operation."""

    public_message = "Failed to store image"


class InternalError(AppError):
    """Unexpected server-side failure."""
