"""User directory endpoints (authenticated)."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import get_user_directory
from app.api.v1.auth import get_current_user
from app.core.log_context import get_logger
from app.schemas.auth import CurrentUser
from app.schemas.user import (
    CreateUserRequest,
    UpdateUserRequest,
    UpdateUserRoleRequest,
    UserWithRole,
)
from app.services.users import UserDirectoryService

logger = get_logger(__name__)
router = APIRouter(dependencies=[Depends(get_current_user)])

Directory = Annotated[UserDirectoryService, Depends(get_user_directory)]


@router.get("", response_model=list[UserWithRole])
def list_users(users: Directory) -> list[UserWithRole]:
    """All users with their role, newest first. Not paginated."""
    return users.list_all()


@router.get("/{user_id}", response_model=UserWithRole)
def get_user(user_id: str, users: Directory) -> UserWithRole:
    return users.get_by_id(user_id)


@router.post("", response_model=UserWithRole, status_code=status.HTTP_201_CREATED)
def create_user(body: CreateUserRequest, users: Directory) -> UserWithRole:
    """
    Create a user with a password credential. Without roleId the USER role is used.
    A taken email returns 422 with the same generic message as any other conflict.
    """
    return users.create(
        email=str(body.email),
        name=body.name,
        password=body.password,
        role_id=str(body.role_id) if body.role_id else None,
    )


@router.patch("/{user_id}", response_model=UserWithRole)
def update_user(user_id: str, body: UpdateUserRequest, users: Directory) -> UserWithRole:
    return users.update(
        user_id,
        email=str(body.email) if body.email else None,
        name=body.name,
        password=body.password,
    )


@router.patch("/{user_id}/role", response_model=UserWithRole)
def update_user_role(
    user_id: str,
    body: UpdateUserRoleRequest,
    users: Directory,
) -> UserWithRole:
    return users.update_role(user_id, body.role_id)


@router.delete("/{user_id}", response_model=UserWithRole)
def delete_user(
    user_id: str,
    users: Directory,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserWithRole:
    """Delete a user and return the record as it was, for auditing."""
    deleted = users.remove(user_id)
    logger.info(
        "User deleted",
        context={"action": "remove", "actor_id": current_user.id, "user_id": deleted.id},
    )
    return deleted
