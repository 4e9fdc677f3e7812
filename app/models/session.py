"""ORM model for authenticated sessions issued by the identity provider."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from app.models.base import Base, new_id, utcnow


class UserSession(Base):
    """Server-side session; the client holds a signed token naming it."""

    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=new_id)
    token = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = relationship("User", back_populates="sessions")
