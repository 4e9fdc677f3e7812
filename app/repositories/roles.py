"""Role storage: atomic get-or-create keyed by the unique role name."""

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from app.models import Role
from app.repositories.result import StoreResult, from_db_error

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_insert(db: Session, table):
    """Return an INSERT construct supporting ON CONFLICT for the session's backend."""
    dialect_name = db.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect_name)
    if insert is None:
        raise NotImplementedError(f"Role upsert is not supported on dialect '{dialect_name}'")
    return insert(table)


def upsert_role(db: Session, name: str, description: str) -> StoreResult[Role]:
    """
    Insert the role unless one with this name exists, then return the stored row.

    Existing rows are left untouched (description is only used on insert). The
    unique constraint on name makes concurrent callers converge on one row.
    """
    stmt = (
        dialect_insert(db, Role)
        .values(name=name, description=description)
        .on_conflict_do_nothing(index_elements=["name"])
    )
    try:
        db.execute(stmt)
        role = db.execute(select(Role).where(Role.name == name)).scalar_one()
    except DBAPIError as e:
        return from_db_error(e, target="role")
    return StoreResult.success(role)


def list_roles(db: Session) -> list[Role]:
    return list(db.execute(select(Role).order_by(Role.name)).scalars())
