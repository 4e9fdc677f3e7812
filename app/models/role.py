"""ORM model for named permission tiers."""

from sqlalchemy import Column, DateTime, String, Text

from app.models.base import Base, new_id, utcnow


class Role(Base):
    """
    Named permission tier referenced by users.

    name is unique; rows are created lazily through an upsert and never deleted by
    normal flows.
    """

    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(64), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
