"""
Application error taxonomy.

Each error carries the HTTP status it maps to, a stable kind and a generic
message. Handlers in ``app.main`` render them as ``{"error", "message"}``.
"""
from fastapi import status


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal Server Error"
    message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class UnauthorizedError(AppError):
    """No or invalid tenant context on the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    message = "Missing authentication context"


class ForbiddenError(AppError):
    """Authenticated, but the resolved permission is insufficient."""

    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    message = "Insufficient permission"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"
    message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"
    message = "Resource already exists"
