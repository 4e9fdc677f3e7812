"""SQLAlchemy declarative Base and shared model configuration."""

import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def new_id() -> str:
    """Primary keys are UUID4 strings, generated application-side."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Set in Python rather than server_default so ordering keeps sub-second precision on SQLite.
    return datetime.now(UTC)
