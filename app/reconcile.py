"""
CLI entrypoint for the roleless-user reconciliation job. Run from cron, e.g.:

  python -m app.reconcile

Or hourly: 0 * * * * cd /path/to/shop-rbac && .venv/bin/python -m app.reconcile
"""

import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.log_context import configure_logging, get_logger
from app.services.reconciliation import reconcile_roleless_users

logger = get_logger(__name__)


def main() -> int:
    """Bind roles to users that signed up but never got one."""
    settings = get_settings()
    configure_logging(settings)
    db = SessionLocal()
    try:
        repaired = reconcile_roleless_users(db, settings)
        logger.info("Reconciliation completed", context={"repaired": repaired})
        return 0
    except Exception as e:
        logger.exception("Reconciliation job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
