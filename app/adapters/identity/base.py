"""Identity provider port: credential storage, password verification and sessions."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from app.models import User, UserSession
from app.schemas.auth import AuthResult

# Invoked with the new user's email after the provider has committed the user row.
UserCreatedHook = Callable[[str], None]


class IdentityError(Exception):
    """Base for identity provider failures; code is a stable machine-readable tag."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class IdentityValidationError(IdentityError):
    """Input rejected by provider policy (email shape, password length)."""


class IdentityConflictError(IdentityError):
    """An account already exists for this email."""


class InvalidCredentialsError(IdentityError):
    """Unknown email or wrong password; the two are deliberately indistinguishable."""

    def __init__(self) -> None:
        super().__init__("INVALID_EMAIL_OR_PASSWORD", "Invalid email or password")


@dataclass(frozen=True)
class AuthenticatedSession:
    session: UserSession
    user: User


class IdentityProvider(ABC):
    """
    Provider-neutral identity interface.

    Implementations guarantee that every callback registered with
    register_after_user_created runs exactly once after a signup has been durably
    committed, and never for a rejected signup.
    """

    def __init__(self, after_user_created: Iterable[UserCreatedHook] = ()) -> None:
        self._after_user_created: list[UserCreatedHook] = list(after_user_created)

    def register_after_user_created(self, hook: UserCreatedHook) -> None:
        self._after_user_created.append(hook)

    def _run_after_user_created(self, email: str) -> None:
        for hook in self._after_user_created:
            hook(email)

    @abstractmethod
    def sign_up_email(
        self,
        *,
        name: str,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Create the user and its password credential, open a session."""

    @abstractmethod
    def sign_in_email(
        self,
        *,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Verify the password credential and open a session."""

    @abstractmethod
    def get_session(self, token: str) -> AuthenticatedSession | None:
        """Resolve a bearer token to its live session, or None."""

    @abstractmethod
    def sign_out(self, token: str) -> bool:
        """Revoke the session named by token. Returns False if none matched."""


__all__ = [
    "AuthenticatedSession",
    "IdentityConflictError",
    "IdentityError",
    "IdentityProvider",
    "IdentityValidationError",
    "InvalidCredentialsError",
    "UserCreatedHook",
]
