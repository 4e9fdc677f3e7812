"""User directory: CRUD over users, keeping each user's password credential in sync."""

from typing import TYPE_CHECKING, NoReturn

from sqlalchemy.orm import Session

from app.adapters.identity import IdentityValidationError, normalize_email
from app.core.database import transaction
from app.core.errors import ConflictError, InputValidationError, NotFoundError, TransientStoreError
from app.core.log_context import get_logger
from app.core.security import hash_password
from app.repositories import credentials as credential_store
from app.repositories import users as user_store
from app.repositories.result import StoreResult, StoreStatus
from app.schemas.user import UserWithRole
from app.services.role_registry import RoleName, resolve_role

if TYPE_CHECKING:
    from app.core.config import Settings

logger = get_logger(__name__)

_NOT_FOUND_MESSAGES = {
    "user": "User not found",
    "role": "Role not found",
}


class UserDirectoryService:
    """
    Stateless per-request service; every public method is one unit of work.

    Multi-step writes (user + credential) run in a single transaction. Storage
    outcomes arrive as StoreResult values and are mapped to NotFoundError,
    ConflictError (generic text) or TransientStoreError here.
    """

    def __init__(self, db: Session, settings: "Settings") -> None:
        self._db = db
        self._settings = settings

    def list_all(self) -> list[UserWithRole]:
        logger.info("Fetching all users in service", context={"action": "findAll"})
        result = user_store.list_users(self._db)
        if not result.ok:
            self._fail("findAll", result)
        users = [UserWithRole.model_validate(u) for u in result.value]
        logger.info(
            "Users fetched successfully in service",
            context={"action": "findAll", "count": len(users)},
        )
        return users

    def get_by_id(self, user_id: str) -> UserWithRole:
        logger.info("Fetching user by ID in service", context={"action": "findOne", "user_id": user_id})
        result = user_store.get_user(self._db, user_id)
        if not result.ok:
            self._fail("findOne", result)
        logger.info("User fetched successfully in service", context={"action": "findOne", "user_id": user_id})
        return UserWithRole.model_validate(result.value)

    def create(
        self,
        email: str,
        name: str,
        password: str,
        role_id: str | None = None,
    ) -> UserWithRole:
        logger.info("Creating user in service", context={"action": "create", "email": email})
        email = _normalized(email)
        # Hash before touching the store so duplicate and fresh emails cost the same.
        password_hash = hash_password(password, rounds=self._settings.BCRYPT_ROUNDS)

        with transaction(self._db):
            if role_id is None:
                role_id = resolve_role(self._db, RoleName.USER).id
            created = user_store.insert_user(self._db, email=email, name=name, role_id=role_id)
            if not created.ok:
                self._fail("create", created)
            user = created.value
            credential = credential_store.insert_credential(
                self._db, user_id=user.id, password_hash=password_hash
            )
            if not credential.ok:
                self._fail("create", credential)

        logger.info("User created successfully in service", context={"action": "create", "user_id": user.id})
        return UserWithRole.model_validate(user)

    def update(
        self,
        user_id: str,
        *,
        email: str | None = None,
        name: str | None = None,
        password: str | None = None,
    ) -> UserWithRole:
        logger.info("Updating user in service", context={"action": "update", "user_id": user_id})
        password_hash = (
            hash_password(password, rounds=self._settings.BCRYPT_ROUNDS) if password else None
        )
        if email is not None:
            email = _normalized(email)
        changes = {k: v for k, v in (("email", email), ("name", name)) if v is not None}

        with transaction(self._db):
            updated = user_store.update_user_fields(self._db, user_id, changes)
            if not updated.ok:
                self._fail("update", updated)
            if password_hash:
                rotated = credential_store.update_credential_password(
                    self._db, user_id=user_id, password_hash=password_hash
                )
                if not rotated.ok:
                    self._fail("update", rotated)
                if rotated.value == 0:
                    logger.warning(
                        "No password credential to update",
                        context={"action": "update", "user_id": user_id},
                    )

        logger.info("User updated successfully in service", context={"action": "update", "user_id": user_id})
        return UserWithRole.model_validate(updated.value)

    def update_role(self, user_id: str, role_id: str) -> UserWithRole:
        logger.info(
            "Updating user role in service",
            context={"action": "updateRole", "user_id": user_id, "role_id": role_id},
        )
        with transaction(self._db):
            updated = user_store.set_user_role(self._db, user_id, role_id)
            if not updated.ok:
                self._fail("updateRole", updated)

        logger.info("User role updated successfully in service", context={"action": "updateRole", "user_id": user_id})
        return UserWithRole.model_validate(updated.value)

    def remove(self, user_id: str) -> UserWithRole:
        """Delete the user and return the record as it was just before deletion."""
        logger.info("Deleting user in service", context={"action": "remove", "user_id": user_id})
        with transaction(self._db):
            found = user_store.get_user(self._db, user_id)
            if not found.ok:
                self._fail("remove", found)
            snapshot = UserWithRole.model_validate(found.value)
            deleted = user_store.delete_user(self._db, found.value)
            if not deleted.ok:
                self._fail("remove", deleted)

        logger.info("User deleted successfully in service", context={"action": "remove", "user_id": user_id})
        return snapshot

    def _fail(self, action: str, result: StoreResult) -> NoReturn:
        """Log the storage outcome and raise the matching application error."""
        context = {"action": action, "status": result.status.value}
        if result.error is not None and not self._settings.is_production:
            context["error"] = str(result.error)
        logger.error("User directory operation failed in service", context=context)

        if result.status is StoreStatus.NOT_FOUND:
            raise NotFoundError(_NOT_FOUND_MESSAGES.get(result.target or "user", "User not found"))
        if result.status is StoreStatus.CONFLICT:
            logger.warning("Unique constraint violated in service", context={"action": action})
            raise ConflictError()
        raise TransientStoreError()


def _normalized(email: str) -> str:
    """Store emails in the same form the identity provider signs users in with."""
    try:
        return normalize_email(email)
    except IdentityValidationError as e:
        raise InputValidationError(e.message, error=e.code) from e
