"""SQLAlchemy ORM models."""

from app.models.account import CREDENTIAL_PROVIDER_ID, Account
from app.models.base import Base
from app.models.role import Role
from app.models.session import UserSession
from app.models.user import User

__all__ = ["Account", "Base", "CREDENTIAL_PROVIDER_ID", "Role", "User", "UserSession"]
