"""Application error types mapped to HTTP responses by the API error handlers."""

from fastapi import status

GENERIC_CONFLICT_MESSAGE = "Invalid credentials"
ACCOUNT_CREATION_MESSAGE = "Unable to create account"
INTERNAL_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base error carrying the status code and the message safe to show clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal Server Error"
    default_message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None, *, error: str | None = None) -> None:
        self.message = message or self.default_message
        if error is not None:
            self.error = error
        super().__init__(self.message)


class InputValidationError(AppError):
    """Malformed input; the message is safe to disclose."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Bad Request"
    default_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    default_message = "Invalid email or password"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"
    default_message = "Resource not found"


class ConflictError(AppError):
    """Uniqueness violation. The default text never reveals which field collided."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error = "Unprocessable Entity"
    default_message = GENERIC_CONFLICT_MESSAGE


class AccountCreationError(AppError):
    """Single outward failure for signup, whatever the underlying cause."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error = "Unprocessable Entity"
    default_message = ACCOUNT_CREATION_MESSAGE


class TransientStoreError(AppError):
    """Connection or transaction fault in the relational store. Not retried."""


class DegradedStateError(AppError):
    """User row committed by the identity provider but the role binding failed."""
