"""Identity provider adapters."""

from .base import (
    AuthenticatedSession,
    IdentityConflictError,
    IdentityError,
    IdentityProvider,
    IdentityValidationError,
    InvalidCredentialsError,
    UserCreatedHook,
)
from .database import DatabaseIdentityProvider, check_password_policy, normalize_email

__all__ = [
    "AuthenticatedSession",
    "DatabaseIdentityProvider",
    "IdentityConflictError",
    "IdentityError",
    "IdentityProvider",
    "IdentityValidationError",
    "InvalidCredentialsError",
    "UserCreatedHook",
    "check_password_policy",
    "normalize_email",
]
