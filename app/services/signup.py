"""
Signup orchestration and the signup-completion hook.

A signup moves through REQUESTED -> IDENTITY_CREATED -> ROLE_BOUND. The identity
provider commits the user first and then calls SignupCompletionHook, which binds the
role picked by the admin-email policy. Failure ends in REJECTED (no user row) or
DEGRADED (user row without a role, repaired by app.services.reconciliation).
"""

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.identity import IdentityError, IdentityProvider
from app.core.database import transaction
from app.core.errors import AccountCreationError, AppError, DegradedStateError, TransientStoreError
from app.core.log_context import get_logger
from app.models import User
from app.repositories import users as user_store
from app.repositories.result import StoreStatus
from app.schemas.auth import AuthResult
from app.services.role_policy import classify
from app.services.role_registry import resolve_role

if TYPE_CHECKING:
    from app.core.config import Settings

logger = get_logger(__name__)


class SignupState(str, Enum):
    REQUESTED = "requested"
    IDENTITY_CREATED = "identity_created"
    ROLE_BOUND = "role_bound"
    REJECTED = "rejected"
    DEGRADED = "degraded"


def assign_role_for_email(db: Session, email: str, admin_email: str | None) -> User:
    """
    Classify email, upsert its role and bind it to the user, in one transaction.

    Raises TransientStoreError if the upsert or the bind fails; nothing is committed then.
    """
    role_name = classify(email, admin_email)
    with transaction(db):
        role = resolve_role(db, role_name)
        bound = user_store.set_user_role_by_email(db, email, role.id)
        if not bound.ok:
            raise TransientStoreError()
        return bound.value


class SignupCompletionHook:
    """Binds a role to a user the identity provider has just committed."""

    def __init__(self, db: Session, settings: "Settings") -> None:
        self._db = db
        self._settings = settings

    def __call__(self, email: str) -> None:
        self.on_user_created(email)

    def on_user_created(self, email: str) -> None:
        verbose = not self._settings.is_production
        if verbose:
            logger.debug(
                "Signup hook invoked",
                context={"state": SignupState.IDENTITY_CREATED.value, "email": email},
            )
        found = user_store.find_user_by_email(self._db, email)
        if found.status is StoreStatus.NOT_FOUND:
            # Signup was rejected upstream and the client already has its error.
            if verbose:
                logger.debug("Signup hook skipped - user not created", context={"email": email})
            return
        if not found.ok:
            raise self._degraded(email, found.error) from found.error

        try:
            user = assign_role_for_email(self._db, email, self._settings.ADMIN_EMAIL)
        except (AppError, SQLAlchemyError) as e:
            raise self._degraded(email, e) from e

        if verbose:
            logger.info(
                "User role assigned in signup hook",
                context={
                    "state": SignupState.ROLE_BOUND.value,
                    "user_id": user.id,
                    "role": user.role.name if user.role else None,
                },
            )

    def _degraded(self, email: str, error: Exception | None) -> DegradedStateError:
        context = {"state": SignupState.DEGRADED.value}
        if not self._settings.is_production:
            context.update({"email": email, "error": str(error)})
        # Logged in every environment: the user now exists without a role.
        logger.error("Failed to assign role after signup", context=context)
        return DegradedStateError()


class SignupService:
    """
    Custom signup entrypoint wrapping the identity provider.

    Role assignment happens in the provider's after-user-created hook; this class
    normalizes every failure to one outward error so callers cannot tell a taken
    email from a weak password or a storage fault.
    """

    def __init__(self, identity: IdentityProvider, settings: "Settings") -> None:
        self._identity = identity
        self._settings = settings

    def signup(
        self,
        email: str,
        password: str,
        name: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        verbose = not self._settings.is_production
        if verbose:
            logger.debug("Signup requested", context={"state": SignupState.REQUESTED.value})
        try:
            result = self._identity.sign_up_email(
                name=name,
                email=email,
                password=password,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except (IdentityError, AppError, SQLAlchemyError) as e:
            if verbose:
                logger.error(
                    "Failed to sign up user in service",
                    context={"state": _failure_state(e).value, "error": str(e)},
                )
            raise AccountCreationError() from e

        if verbose:
            logger.info(
                "User signed up in service",
                context={"state": SignupState.ROLE_BOUND.value, "email": email, "name": name},
            )
        return result


def _failure_state(error: Exception) -> SignupState:
    if isinstance(error, DegradedStateError):
        return SignupState.DEGRADED
    return SignupState.REJECTED
