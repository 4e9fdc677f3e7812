"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthResult,
    CurrentUser,
    ProviderSignupRequest,
    SessionUser,
    SignInRequest,
    SignupRequest,
)
from app.schemas.error import ErrorResponse
from app.schemas.health import HealthResponse
from app.schemas.user import (
    CreateUserRequest,
    RoleRead,
    UpdateUserRequest,
    UpdateUserRoleRequest,
    UserWithRole,
)

__all__ = [
    "AuthResult",
    "CreateUserRequest",
    "CurrentUser",
    "ErrorResponse",
    "HealthResponse",
    "ProviderSignupRequest",
    "RoleRead",
    "SessionUser",
    "SignInRequest",
    "SignupRequest",
    "UpdateUserRequest",
    "UpdateUserRoleRequest",
    "UserWithRole",
]
