"""ORM model for application users (identity and RBAC)."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from app.models.base import Base, new_id, utcnow


class User(Base):
    """
    User identity record.

    email is stored as given (case-sensitive uniqueness); role comparisons done by
    policy are case-insensitive. role_id stays NULL until a role has been bound.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(320), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    email_verified = Column(Boolean, nullable=False, default=False)
    image = Column(String(2048), nullable=True)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    role = relationship("Role", lazy="joined")
    accounts = relationship(
        "Account",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    sessions = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
