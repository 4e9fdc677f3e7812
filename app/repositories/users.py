"""User storage helpers. Every call returns a StoreResult; commit is the caller's job."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from app.models import User
from app.repositories.result import StoreResult, StoreStatus, from_db_error


def list_users(db: Session) -> StoreResult[list[User]]:
    """All users with their role, newest first."""
    try:
        users = db.execute(
            select(User).order_by(User.created_at.desc(), User.id)
        ).unique().scalars().all()
    except DBAPIError as e:
        return from_db_error(e)
    return StoreResult.success(list(users))


def get_user(db: Session, user_id: str) -> StoreResult[User]:
    try:
        user = db.get(User, user_id)
    except DBAPIError as e:
        return from_db_error(e, target="user")
    if user is None:
        return StoreResult.not_found("user")
    return StoreResult.success(user)


def find_user_by_email(db: Session, email: str) -> StoreResult[User]:
    try:
        user = db.execute(select(User).where(User.email == email)).unique().scalar_one_or_none()
    except DBAPIError as e:
        return from_db_error(e, target="user")
    if user is None:
        return StoreResult.not_found("user")
    return StoreResult.success(user)


def find_roleless_users(db: Session) -> StoreResult[list[User]]:
    try:
        users = db.execute(
            select(User).where(User.role_id.is_(None)).order_by(User.created_at)
        ).unique().scalars().all()
    except DBAPIError as e:
        return from_db_error(e)
    return StoreResult.success(list(users))


def insert_user(
    db: Session,
    *,
    email: str,
    name: str,
    role_id: str | None = None,
) -> StoreResult[User]:
    user = User(email=email, name=name, role_id=role_id)
    db.add(user)
    try:
        db.flush()
    except DBAPIError as e:
        # A foreign-key failure here means role_id does not exist; anything else is the email.
        result = from_db_error(e, target="email")
        if result.status is StoreStatus.NOT_FOUND:
            return StoreResult.not_found("role", e)
        return result
    return StoreResult.success(user)


def update_user_fields(db: Session, user_id: str, changes: dict[str, Any]) -> StoreResult[User]:
    """Apply scalar changes (email, name) to one user. Empty changes just return the row."""
    found = get_user(db, user_id)
    if not found.ok:
        return found
    user = found.value
    for field, value in changes.items():
        setattr(user, field, value)
    try:
        db.flush()
    except DBAPIError as e:
        return from_db_error(e, target="email")
    return StoreResult.success(user)


def set_user_role(db: Session, user_id: str, role_id: str) -> StoreResult[User]:
    """Single-row role update; referential integrity on role_id is left to the store."""
    try:
        result = db.execute(
            update(User).where(User.id == user_id).values(role_id=role_id)
        )
    except DBAPIError as e:
        return from_db_error(e, target="role")
    if result.rowcount == 0:
        return StoreResult.not_found("user")
    user = db.get(User, user_id, populate_existing=True)
    return StoreResult.success(user)


def set_user_role_by_email(db: Session, email: str, role_id: str) -> StoreResult[User]:
    try:
        result = db.execute(
            update(User).where(User.email == email).values(role_id=role_id)
        )
    except DBAPIError as e:
        return from_db_error(e, target="role")
    if result.rowcount == 0:
        return StoreResult.not_found("user")
    return find_user_by_email(db, email)


def delete_user(db: Session, user: User) -> StoreResult[User]:
    """Delete the user; credentials and sessions go with it (ON DELETE CASCADE)."""
    db.delete(user)
    try:
        db.flush()
    except DBAPIError as e:
        return from_db_error(e, target="user")
    return StoreResult.success(user)
