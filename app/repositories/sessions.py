"""Session storage owned by the identity provider."""

import secrets
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models import UserSession

SESSION_TOKEN_BYTES = 32


def create_session(
    db: Session,
    *,
    user_id: str,
    expires_at: datetime,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> UserSession:
    session = UserSession(
        token=secrets.token_urlsafe(SESSION_TOKEN_BYTES),
        user_id=user_id,
        expires_at=expires_at,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512] or None,
    )
    db.add(session)
    db.flush()
    return session


def get_active_session(db: Session, token: str) -> UserSession | None:
    """Return the unexpired session for token, or None."""
    now = datetime.now(UTC)
    return db.execute(
        select(UserSession).where(
            UserSession.token == token,
            UserSession.expires_at > now,
        )
    ).scalars().first()


def delete_session(db: Session, token: str) -> int:
    result = db.execute(delete(UserSession).where(UserSession.token == token))
    return result.rowcount
