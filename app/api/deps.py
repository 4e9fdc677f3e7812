"""Request-scoped service wiring for route dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from app.adapters.identity import DatabaseIdentityProvider, IdentityProvider
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.services.signup import SignupCompletionHook, SignupService
from app.services.users import UserDirectoryService


def get_identity_provider(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> IdentityProvider:
    """Identity provider with the signup-completion hook registered on its user-created port."""
    return DatabaseIdentityProvider(
        db,
        settings,
        after_user_created=[SignupCompletionHook(db, settings)],
    )


def get_signup_service(
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SignupService:
    return SignupService(identity, settings)


def get_user_directory(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserDirectoryService:
    return UserDirectoryService(db, settings)
