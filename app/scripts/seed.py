"""
Seed the catalog roles and one demo user per role. Run from project root:
  python -m app.scripts.seed [--reset] [--password PASSWORD]

--reset deletes every user and role first (sessions and credentials cascade).
"""
import argparse
import sys

from sqlalchemy import delete

from app.core.config import get_settings
from app.core.database import SessionLocal, transaction
from app.core.errors import AppError
from app.core.log_context import configure_logging, get_logger
from app.models import Role, User
from app.repositories.roles import list_roles
from app.services.role_registry import ROLE_DESCRIPTIONS, RoleName, resolve_role
from app.services.users import UserDirectoryService

logger = get_logger(__name__)

DEMO_USERS = (
    ("admin@example.com", "Admin User", RoleName.ADMIN),
    ("manager@example.com", "Manager User", RoleName.PRODUCT_MANAGER),
    ("user@example.com", "Regular User", RoleName.USER),
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed roles and demo users.")
    parser.add_argument("--reset", action="store_true", help="Delete all users and roles first")
    parser.add_argument("--password", default="password123", help="Password for demo users")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings)
    db = SessionLocal()
    try:
        if args.reset:
            with transaction(db):
                users_deleted = db.execute(delete(User)).rowcount
                roles_deleted = db.execute(delete(Role)).rowcount
            logger.info(
                "Cleared database",
                context={"users_deleted": users_deleted, "roles_deleted": roles_deleted},
            )

        with transaction(db):
            roles = {
                name: resolve_role(db, name, description)
                for name, description in ROLE_DESCRIPTIONS.items()
            }
            role_ids = {name: role.id for name, role in roles.items()}
        logger.info("Roles seeded", context={"roles": [r.name for r in list_roles(db)]})

        directory = UserDirectoryService(db, settings)
        created = 0
        for email, name, role_name in DEMO_USERS:
            try:
                directory.create(email, name, args.password, role_id=role_ids[role_name])
                created += 1
            except AppError as e:
                logger.warning("Demo user skipped", context={"email": email, "reason": e.message})
        logger.info("Seeding completed", context={"users_created": created})
        return 0
    except Exception as e:
        logger.exception("Seeding failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
