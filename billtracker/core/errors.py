"""API error types and their JSON rendering."""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ApiError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(ApiError):
    """Missing or malformed required field."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationRequired(ApiError):
    """No session or bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AccessDenied(ApiError):
    """Caller is not a member of the owning organization."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ApiError):
    """Referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class PersistenceFailed(ApiError):
    """A data store operation failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError as an ``{ok, error}`` JSON body."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.message},
    )
