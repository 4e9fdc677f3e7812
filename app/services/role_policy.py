"""Role assignment policy: which role a newly signed-up email receives."""

from app.services.role_registry import RoleName


def is_admin_email(email: str, admin_email: str | None) -> bool:
    """Case-insensitive exact match against the single configured admin email."""
    configured = (admin_email or "").strip().lower()
    if not configured:
        return False
    return (email or "").strip().lower() == configured


def classify(email: str, admin_email: str | None) -> RoleName:
    """Return ADMIN when email is the configured admin email, USER otherwise. No I/O."""
    return RoleName.ADMIN if is_admin_email(email, admin_email) else RoleName.USER
