"""Tests for app.services.reconciliation: repairing users left without a role."""

import unittest
from unittest.mock import MagicMock, patch

from sqlalchemy import select

from app.core.errors import TransientStoreError
from app.models import User
from app.repositories.result import StoreResult
from app.services.reconciliation import reconcile_roleless_users
from app.services.signup import assign_role_for_email
from tests.support import ADMIN_EMAIL, DatabaseTestCase


class TestReconcileRolelessUsers(DatabaseTestCase):
    def _add_roleless(self, *emails: str) -> None:
        for email in emails:
            self.db.add(User(email=email, name=email.split("@")[0]))
        self.db.commit()

    def _role_of(self, email: str) -> str | None:
        user = self.db.execute(select(User).where(User.email == email)).unique().scalar_one()
        return user.role.name if user.role else None

    def test_no_roleless_users(self) -> None:
        self.assertEqual(reconcile_roleless_users(self.db, self.settings), 0)

    def test_binds_policy_role(self) -> None:
        self._add_roleless(ADMIN_EMAIL, "shopper@example.com")
        repaired = reconcile_roleless_users(self.db, self.settings)
        self.assertEqual(repaired, 2)
        self.db.expire_all()
        self.assertEqual(self._role_of(ADMIN_EMAIL), "ADMIN")
        self.assertEqual(self._role_of("shopper@example.com"), "USER")

    def test_is_idempotent(self) -> None:
        self._add_roleless("shopper@example.com")
        self.assertEqual(reconcile_roleless_users(self.db, self.settings), 1)
        self.assertEqual(reconcile_roleless_users(self.db, self.settings), 0)

    def test_continues_past_failures(self) -> None:
        self._add_roleless("first@example.com", "second@example.com")

        def flaky(session, email, admin_email):
            if email == "first@example.com":
                raise TransientStoreError()
            return assign_role_for_email(session, email, admin_email)

        with patch("app.services.reconciliation.assign_role_for_email", side_effect=flaky):
            repaired = reconcile_roleless_users(self.db, self.settings)
        self.assertEqual(repaired, 1)
        self.db.expire_all()
        self.assertIsNone(self._role_of("first@example.com"))
        self.assertEqual(self._role_of("second@example.com"), "USER")


class TestReconcileStoreFailure(unittest.TestCase):
    def test_lookup_failure_raises(self) -> None:
        settings = MagicMock()
        with patch(
            "app.services.reconciliation.user_store.find_roleless_users",
            return_value=StoreResult.transient(Exception("down")),
        ):
            with self.assertRaises(TransientStoreError):
                reconcile_roleless_users(MagicMock(), settings)
