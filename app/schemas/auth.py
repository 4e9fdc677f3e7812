"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.core.security import EMAIL_MAX_LEN, NAME_MAX_LEN, PASSWORD_MAX_LEN


class SignupRequest(BaseModel):
    """Body for the signup endpoints. Password policy is enforced by the identity provider."""

    email: EmailStr = Field(..., description="Email address")
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN, description="Display name")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")

    class Config:
        extra = "forbid"


class ProviderSignupRequest(BaseModel):
    """Body for the identity provider's own signup path; the provider validates email shape."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN, description="Email address")
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN, description="Display name")
    password: str = Field(..., min_length=1, description="Password")

    class Config:
        extra = "forbid"


class SignInRequest(BaseModel):
    """Credentials for sign in."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN, description="Email address")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")

    class Config:
        extra = "forbid"


class SessionUser(BaseModel):
    """Identity returned by the identity provider (no role, no secrets)."""

    id: str
    email: str
    name: str
    email_verified: bool
    image: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AuthResult(BaseModel):
    """Identity plus the bearer token proving it."""

    user: SessionUser
    token: str = Field(..., description="Bearer session token")


class CurrentUser(BaseModel):
    """Authenticated user (id, email, role) for dependency injection."""

    id: str
    email: str
    name: str
    role: str | None = None
    session_id: str
