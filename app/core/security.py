"""Password hashing and session-token (JWT) creation/verification."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings, settings

# Password policy enforced by the identity provider.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 320


def hash_password(plain_password: str, rounds: int) -> str:
    """Hash a plain-text password for storage with the given bcrypt cost (Settings.BCRYPT_ROUNDS)."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_session_token(
    sub: str,
    session_id: str,
    expires_at: datetime,
    settings: Settings = settings,
) -> str:
    """Create a JWT naming the user (sub) and the server-side session (sid)."""
    payload: dict[str, Any] = {
        "sub": str(sub),
        "sid": session_id,
        "exp": expires_at,
        "iat": datetime.now(UTC),
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_session_token(token: str, settings: Settings = settings) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, sid, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
    )


def session_expiry(minutes: int) -> datetime:
    return datetime.now(UTC) + timedelta(minutes=minutes)
