"""ORM model for provider-scoped credentials (one row per user per auth provider)."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base, new_id, utcnow

# provider_id of email/password credentials
CREDENTIAL_PROVIDER_ID = "credential"


class Account(Base):
    """
    Authentication secret bound to a user for one provider.

    Only id is unique: (user_id, provider_id) carries no constraint, so lookups must
    filter by user_id, account_id and provider_id together.
    """

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=new_id)
    account_id = Column(String(255), nullable=False)
    provider_id = Column(String(64), nullable=False)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    password = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = relationship("User", back_populates="accounts")
