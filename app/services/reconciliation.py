"""Reconciliation: bind a role to users left roleless by a failed signup hook."""

from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AppError, TransientStoreError
from app.core.log_context import get_logger
from app.repositories import users as user_store
from app.services.signup import SignupState, assign_role_for_email

if TYPE_CHECKING:
    from app.core.config import Settings

logger = get_logger(__name__)


def reconcile_roleless_users(session: Session, settings: "Settings") -> int:
    """
    Assign the policy role to every user whose role_id is NULL.

    Each user is repaired in its own transaction; a failure is logged and the sweep
    moves on. Returns the number of users repaired. Idempotent: safe to run repeatedly.
    """
    found = user_store.find_roleless_users(session)
    if not found.ok:
        raise TransientStoreError()

    emails = [u.email for u in found.value]
    if not emails:
        logger.info("Reconciliation run: no roleless users")
        return 0

    repaired = 0
    for email in emails:
        try:
            assign_role_for_email(session, email, settings.ADMIN_EMAIL)
        except (AppError, SQLAlchemyError) as e:
            context = {"state": SignupState.DEGRADED.value}
            if not settings.is_production:
                context.update({"email": email, "error": str(e)})
            logger.error("Reconciliation failed for user", context=context)
            continue
        repaired += 1

    logger.info(
        "Reconciliation run completed",
        context={"roleless": len(emails), "repaired": repaired},
    )
    return repaired
