"""Role registry: fixed catalog of role names and idempotent get-or-create."""

from enum import Enum

from sqlalchemy.orm import Session

from app.core.errors import TransientStoreError
from app.core.log_context import get_logger
from app.models import Role
from app.repositories import roles as role_store

logger = get_logger(__name__)


class RoleName(str, Enum):
    ADMIN = "ADMIN"
    PRODUCT_MANAGER = "PRODUCT_MANAGER"
    USER = "USER"


ROLE_DESCRIPTIONS: dict[RoleName, str] = {
    RoleName.ADMIN: "Administrator",
    RoleName.PRODUCT_MANAGER: "Product manager",
    RoleName.USER: "Regular user",
}


def default_description(name: str) -> str:
    try:
        return ROLE_DESCRIPTIONS[RoleName(name)]
    except ValueError:
        return ""


def resolve_role(db: Session, name: str | RoleName, description: str | None = None) -> Role:
    """
    Fetch the role called name, creating it with description if it does not exist.

    An existing role is returned unchanged; description only applies on creation and
    falls back to the catalog description. Runs inside the caller's transaction.
    """
    role_name = name.value if isinstance(name, RoleName) else name
    if description is None:
        description = default_description(role_name)
    result = role_store.upsert_role(db, role_name, description)
    if not result.ok:
        logger.error(
            "Role upsert failed",
            context={"action": "resolveRole", "role": role_name, "status": result.status.value},
        )
        raise TransientStoreError()
    return result.value
