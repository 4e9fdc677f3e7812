"""Identity provider backed by the application database (users, accounts, sessions)."""

from collections.abc import Iterable
from functools import lru_cache
from typing import TYPE_CHECKING

import jwt
from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session

from app.adapters.identity.base import (
    AuthenticatedSession,
    IdentityConflictError,
    IdentityError,
    IdentityProvider,
    IdentityValidationError,
    InvalidCredentialsError,
    UserCreatedHook,
)
from app.core.database import transaction
from app.core.log_context import get_logger
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    create_session_token,
    decode_session_token,
    hash_password,
    session_expiry,
    verify_password,
)
from app.models import User
from app.repositories import credentials as credential_store
from app.repositories import sessions as session_store
from app.repositories import users as user_store
from app.repositories.result import StoreStatus
from app.schemas.auth import AuthResult, SessionUser

if TYPE_CHECKING:
    from app.core.config import Settings

logger = get_logger(__name__)


@lru_cache
def _dummy_hash(rounds: int) -> str:
    """Hash checked against when the email is unknown, so sign-in timing matches."""
    return hash_password("dummy-password-for-timing", rounds=rounds)


def normalize_email(email: str) -> str:
    """Validate email shape and return its normalized form (domain lowercased)."""
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise IdentityValidationError("INVALID_EMAIL", "Invalid email") from e


def check_password_policy(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise IdentityValidationError("PASSWORD_TOO_SHORT", "Password too short")
    if len(password) > PASSWORD_MAX_LEN:
        raise IdentityValidationError("PASSWORD_TOO_LONG", "Password too long")


class DatabaseIdentityProvider(IdentityProvider):
    """Stores users, password credentials and sessions through the request's DB session."""

    def __init__(
        self,
        db: Session,
        settings: "Settings",
        after_user_created: Iterable[UserCreatedHook] = (),
    ) -> None:
        super().__init__(after_user_created)
        self._db = db
        self._settings = settings

    def sign_up_email(
        self,
        *,
        name: str,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        normalized = normalize_email(email)
        check_password_policy(password)
        name = name.strip()
        if not name:
            raise IdentityValidationError("INVALID_NAME", "Name is required")
        password_hash = hash_password(password, rounds=self._settings.BCRYPT_ROUNDS)

        with transaction(self._db):
            created = user_store.insert_user(self._db, email=normalized, name=name)
            if created.status is StoreStatus.CONFLICT:
                raise IdentityConflictError("USER_ALREADY_EXISTS", "User already exists")
            if not created.ok:
                raise IdentityError("FAILED_TO_CREATE_USER", "Failed to create user")
            user = created.value
            credential = credential_store.insert_credential(
                self._db, user_id=user.id, password_hash=password_hash
            )
            if not credential.ok:
                raise IdentityError("FAILED_TO_CREATE_USER", "Failed to create user")
            result = self._open_session(user, ip_address, user_agent)

        logger.debug("Identity created", context={"user_id": result.user.id})
        # Hooks run only after the commit above; a failure here leaves the user in place.
        self._run_after_user_created(normalized)
        return result

    def sign_in_email(
        self,
        *,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        try:
            normalized = normalize_email(email)
        except IdentityValidationError:
            raise InvalidCredentialsError() from None

        found = user_store.find_user_by_email(self._db, normalized)
        if not found.ok:
            verify_password(password, _dummy_hash(self._settings.BCRYPT_ROUNDS))
            raise InvalidCredentialsError()
        user = found.value
        credential = credential_store.get_credential(self._db, user.id)
        if not credential.ok or not credential.value.password:
            verify_password(password, _dummy_hash(self._settings.BCRYPT_ROUNDS))
            raise InvalidCredentialsError()
        if not verify_password(password, credential.value.password):
            raise InvalidCredentialsError()

        with transaction(self._db):
            return self._open_session(user, ip_address, user_agent)

    def get_session(self, token: str) -> AuthenticatedSession | None:
        payload = self._decode(token)
        if payload is None:
            return None
        session = session_store.get_active_session(self._db, payload["sid"])
        if session is None or session.user_id != payload["sub"]:
            return None
        return AuthenticatedSession(session=session, user=session.user)

    def sign_out(self, token: str) -> bool:
        payload = self._decode(token)
        if payload is None:
            return False
        with transaction(self._db):
            deleted = session_store.delete_session(self._db, payload["sid"])
        return deleted > 0

    def _open_session(
        self, user: User, ip_address: str | None, user_agent: str | None
    ) -> AuthResult:
        session = session_store.create_session(
            self._db,
            user_id=user.id,
            expires_at=session_expiry(self._settings.JWT_EXPIRE_MINUTES),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        token = create_session_token(
            user.id, session.token, session.expires_at, self._settings
        )
        return AuthResult(user=SessionUser.model_validate(user), token=token)

    def _decode(self, token: str) -> dict | None:
        try:
            payload = decode_session_token(token, self._settings)
        except jwt.PyJWTError:
            return None
        if not payload.get("sub") or not payload.get("sid"):
            return None
        return payload


__all__ = ["DatabaseIdentityProvider", "check_password_policy", "normalize_email"]
