"""Domain error types.

Services raise these; the HTTP layer renders them through a single exception
handler registered in ``src.main``:

- ValidationError: payload violates a business rule (400)
- AuthorizationError: wrong trainer or role for the resource (403)
- NotFoundError: missing client, plan or log (404)
- ConflictError: duplicate training log for the same day (409)
- DispatchError: notification delivery failed (internal, never rendered)
"""
from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto an HTTP response.

    Attributes:
        code: Stable machine-readable error code
        message: Human-readable message shown to the caller
        status_code: HTTP status used when the error reaches the API boundary
    """

    code: str = "app_error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class ValidationError(AppError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(AppError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class Forbidden(AuthorizationError):
    code = "forbidden"


class NotClientsTrainer(AuthorizationError):
    code = "not_clients_trainer"


class NotFoundError(AppError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class DispatchError(AppError):
    """Notification could not be persisted or delivered."""

    code = "dispatch_failed"
