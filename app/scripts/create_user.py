"""
Create a user with a password credential. Run from project root:
  python -m app.scripts.create_user EMAIL NAME PASSWORD [role]
Example:
  python -m app.scripts.create_user admin@example.com "Admin User" your-secure-password ADMIN
"""
import argparse
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal, transaction
from app.core.errors import AppError
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.services.role_registry import RoleName, resolve_role
from app.services.users import UserDirectoryService


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a user without going through signup.")
    parser.add_argument("email", help="Email address")
    parser.add_argument("name", help="Display name (3-255 chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=RoleName.USER.value,
        choices=[r.value for r in RoleName],
    )
    args = parser.parse_args()

    name = args.name.strip()
    if len(name) < 3 or len(name) > 255:
        print("Name must be 3-255 characters.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    settings = get_settings()
    db = SessionLocal()
    try:
        with transaction(db):
            role_id = resolve_role(db, args.role).id
        user = UserDirectoryService(db, settings).create(
            email=args.email,
            name=name,
            password=args.password,
            role_id=role_id,
        )
        print(f"Created user '{user.email}' with role '{args.role}'.")
        return 0
    except AppError as e:
        print(f"Could not create user: {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
