"""Request/response schemas for the user directory."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN


class RoleRead(BaseModel):
    id: str
    name: str
    description: str

    class Config:
        from_attributes = True


class UserWithRole(BaseModel):
    """User record joined with its role (role is None until one is bound)."""

    id: str
    email: str
    name: str
    email_verified: bool
    image: str | None = None
    role_id: str | None = None
    role: RoleRead | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreateUserRequest(BaseModel):
    """Administrative user creation. role_id defaults to the USER role."""

    email: EmailStr
    name: str = Field(..., min_length=3, max_length=NAME_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role_id: UUID | None = Field(default=None, alias="roleId")

    class Config:
        extra = "forbid"
        populate_by_name = True


class UpdateUserRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    email: EmailStr | None = None
    name: str | None = Field(default=None, min_length=3, max_length=NAME_MAX_LEN)
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )

    class Config:
        extra = "forbid"


class UpdateUserRoleRequest(BaseModel):
    role_id: str = Field(..., min_length=1, alias="roleId")

    class Config:
        extra = "forbid"
        populate_by_name = True
