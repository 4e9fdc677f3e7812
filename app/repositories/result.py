"""Tagged results returned by storage helpers, so services never see driver error codes."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError

T = TypeVar("T")

# PostgreSQL SQLSTATE codes
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"


class StoreStatus(str, Enum):
    OK = "ok"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """
    Outcome of one storage call.

    target names what was missing or conflicting ("user", "role", "email") when the
    store can tell; error keeps the driver exception for logging only.
    """

    status: StoreStatus
    value: T | None = None
    target: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK

    @classmethod
    def success(cls, value: T) -> "StoreResult[T]":
        return cls(StoreStatus.OK, value=value)

    @classmethod
    def conflict(cls, target: str | None = None, error: Exception | None = None) -> "StoreResult[T]":
        return cls(StoreStatus.CONFLICT, target=target, error=error)

    @classmethod
    def not_found(cls, target: str | None = None, error: Exception | None = None) -> "StoreResult[T]":
        return cls(StoreStatus.NOT_FOUND, target=target, error=error)

    @classmethod
    def transient(cls, error: Exception | None = None) -> "StoreResult[T]":
        return cls(StoreStatus.TRANSIENT, error=error)


def classify_db_error(exc: DBAPIError) -> StoreStatus:
    """
    Map a driver error to a StoreStatus using documented code fields only:
    psycopg2 ``pgcode`` and sqlite3 ``sqlite_errorname``.
    """
    if not isinstance(exc, IntegrityError):
        return StoreStatus.TRANSIENT
    orig = exc.orig
    pgcode = getattr(orig, "pgcode", None)
    if pgcode == PG_FOREIGN_KEY_VIOLATION:
        return StoreStatus.NOT_FOUND
    if pgcode == PG_UNIQUE_VIOLATION:
        return StoreStatus.CONFLICT
    sqlite_name = getattr(orig, "sqlite_errorname", "") or ""
    if sqlite_name == "SQLITE_CONSTRAINT_FOREIGNKEY":
        return StoreStatus.NOT_FOUND
    # Remaining integrity failures (unique, primary key, not-null) are write conflicts.
    return StoreStatus.CONFLICT


def from_db_error(exc: DBAPIError, target: str | None = None) -> StoreResult:
    status = classify_db_error(exc)
    if status is StoreStatus.TRANSIENT:
        return StoreResult.transient(exc)
    return StoreResult(status, target=target, error=exc)
