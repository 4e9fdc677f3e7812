"""Credential (account) storage. Rows are addressed by the full compound key."""

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from app.models import CREDENTIAL_PROVIDER_ID, Account
from app.repositories.result import StoreResult, from_db_error


def _compound_filter(user_id: str, provider_id: str):
    # account_id equals user_id for password credentials; all three columns are required
    # because only Account.id is unique.
    return (
        Account.user_id == user_id,
        Account.account_id == user_id,
        Account.provider_id == provider_id,
    )


def insert_credential(
    db: Session,
    *,
    user_id: str,
    password_hash: str,
    provider_id: str = CREDENTIAL_PROVIDER_ID,
) -> StoreResult[Account]:
    account = Account(
        user_id=user_id,
        account_id=user_id,
        provider_id=provider_id,
        password=password_hash,
    )
    db.add(account)
    try:
        db.flush()
    except DBAPIError as e:
        return from_db_error(e, target="credential")
    return StoreResult.success(account)


def get_credential(
    db: Session,
    user_id: str,
    provider_id: str = CREDENTIAL_PROVIDER_ID,
) -> StoreResult[Account]:
    try:
        account = db.execute(
            select(Account).where(*_compound_filter(user_id, provider_id))
        ).scalars().first()
    except DBAPIError as e:
        return from_db_error(e, target="credential")
    if account is None:
        return StoreResult.not_found("credential")
    return StoreResult.success(account)


def update_credential_password(
    db: Session,
    *,
    user_id: str,
    password_hash: str,
    provider_id: str = CREDENTIAL_PROVIDER_ID,
) -> StoreResult[int]:
    """Replace the stored hash; returns the number of credential rows updated."""
    try:
        result = db.execute(
            update(Account)
            .where(*_compound_filter(user_id, provider_id))
            .values(password=password_hash)
            .execution_options(synchronize_session=False)
        )
    except DBAPIError as e:
        return from_db_error(e, target="credential")
    return StoreResult.success(result.rowcount)
