"""Tests for app.services.users.UserDirectoryService."""

from datetime import timedelta

from sqlalchemy import func, select

from app.adapters.identity import DatabaseIdentityProvider, IdentityConflictError
from app.core.errors import GENERIC_CONFLICT_MESSAGE, ConflictError, InputValidationError, NotFoundError
from app.core.security import verify_password
from app.models import CREDENTIAL_PROVIDER_ID, Account, Role, User, UserSession
from app.repositories import credentials as credential_store
from app.services.role_registry import RoleName, resolve_role
from app.services.users import UserDirectoryService
from tests.support import DatabaseTestCase


class UserDirectoryTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service = UserDirectoryService(self.db, self.settings)

    def create(self, email: str = "shopper@example.com", name: str = "Shopper", **kwargs):
        return self.service.create(email, name, kwargs.pop("password", "password123"), **kwargs)

    def credential_for(self, user_id: str, provider_id: str = CREDENTIAL_PROVIDER_ID) -> Account | None:
        return self.db.execute(
            select(Account).where(Account.user_id == user_id, Account.provider_id == provider_id)
        ).scalar_one_or_none()


class TestCreate(UserDirectoryTestCase):
    def test_default_role_is_user(self) -> None:
        user = self.create()
        self.assertEqual(user.role.name, "USER")
        self.assertEqual(user.role_id, user.role.id)

    def test_explicit_role(self) -> None:
        admin = resolve_role(self.db, RoleName.ADMIN)
        self.db.commit()
        user = self.create(role_id=admin.id)
        self.assertEqual(user.role.name, "ADMIN")

    def test_credential_uses_account_id_convention(self) -> None:
        user = self.create()
        credential = self.credential_for(user.id)
        self.assertEqual(credential.account_id, user.id)
        self.assertTrue(verify_password("password123", credential.password))

    def test_scenario_c_duplicate_email_is_generic_conflict(self) -> None:
        self.create()
        with self.assertRaises(ConflictError) as ctx:
            self.create(name="Someone Else")
        message = ctx.exception.message
        self.assertEqual(message, GENERIC_CONFLICT_MESSAGE)
        self.assertNotIn("exist", message.lower())
        self.assertNotIn("duplicate", message.lower())
        count = self.db.execute(
            select(func.count()).select_from(User).where(User.email == "shopper@example.com")
        ).scalar_one()
        self.assertEqual(count, 1)
        self.assertEqual(self.db.execute(select(func.count()).select_from(Account)).scalar_one(), 1)

    def test_unknown_role_id_is_role_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.create(role_id="00000000-0000-0000-0000-000000000000")
        self.assertEqual(ctx.exception.message, "Role not found")
        self.assertEqual(self.db.execute(select(func.count()).select_from(User)).scalar_one(), 0)


class TestRead(UserDirectoryTestCase):
    def test_list_all_newest_first_with_role(self) -> None:
        first = self.create("first@example.com")
        second = self.create("second@example.com")
        # Force distinct timestamps regardless of clock resolution.
        self.db.get(User, first.id).created_at = self.db.get(User, second.id).created_at - timedelta(seconds=5)
        self.db.commit()
        users = self.service.list_all()
        self.assertEqual([u.id for u in users], [second.id, first.id])
        self.assertTrue(all(u.role is not None for u in users))

    def test_get_by_id_missing(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.service.get_by_id("missing")
        self.assertIn("User not found", ctx.exception.message)


class TestUpdate(UserDirectoryTestCase):
    def test_scenario_d_missing_user(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.service.update("nonexistent-id", email="x@y.com")
        self.assertIn("User not found", ctx.exception.message)

    def test_scalar_fields(self) -> None:
        user = self.create()
        updated = self.service.update(user.id, name="Renamed", email="renamed@example.com")
        self.assertEqual(updated.name, "Renamed")
        self.assertEqual(updated.email, "renamed@example.com")

    def test_email_collision_is_generic_conflict(self) -> None:
        self.create("taken@example.com")
        user = self.create("mine@example.com")
        with self.assertRaises(ConflictError) as ctx:
            self.service.update(user.id, email="taken@example.com")
        self.assertEqual(ctx.exception.message, GENERIC_CONFLICT_MESSAGE)

    def test_password_rotates_credential(self) -> None:
        user = self.create()
        self.service.update(user.id, password="new-password-1")
        self.db.expire_all()
        self.assertTrue(verify_password("new-password-1", self.credential_for(user.id).password))

    def test_password_update_does_not_touch_other_provider_rows(self) -> None:
        user = self.create()
        other = Account(user_id=user.id, account_id=user.id, provider_id="github", password="untouched")
        self.db.add(other)
        self.db.commit()
        self.service.update(user.id, password="new-password-1")
        self.db.expire_all()
        self.assertEqual(self.credential_for(user.id, "github").password, "untouched")
        self.assertTrue(verify_password("new-password-1", self.credential_for(user.id).password))

    def test_password_update_requires_matching_account_id(self) -> None:
        user = self.create()
        credential = self.credential_for(user.id)
        credential.account_id = "someone-else"
        self.db.commit()
        original = credential.password
        rotated = credential_store.update_credential_password(self.db, user_id=user.id, password_hash="x")
        self.assertEqual(rotated.value, 0)
        self.db.rollback()
        self.assertEqual(self.credential_for(user.id).password, original)


class TestUpdateRole(UserDirectoryTestCase):
    def test_changes_role(self) -> None:
        user = self.create()
        manager = resolve_role(self.db, RoleName.PRODUCT_MANAGER)
        self.db.commit()
        updated = self.service.update_role(user.id, manager.id)
        self.assertEqual(updated.role.name, "PRODUCT_MANAGER")

    def test_missing_user(self) -> None:
        role = resolve_role(self.db, RoleName.USER)
        self.db.commit()
        with self.assertRaises(NotFoundError) as ctx:
            self.service.update_role("missing", role.id)
        self.assertEqual(ctx.exception.message, "User not found")

    def test_missing_role_relies_on_foreign_key(self) -> None:
        user = self.create()
        with self.assertRaises(NotFoundError) as ctx:
            self.service.update_role(user.id, "no-such-role")
        self.assertEqual(ctx.exception.message, "Role not found")
        self.assertEqual(self.service.get_by_id(user.id).role.name, "USER")


class TestRemove(UserDirectoryTestCase):
    def test_scenario_e_snapshot_and_cascade(self) -> None:
        user = self.create()
        self.db.add(UserSession(token="tok-1", user_id=user.id, expires_at=user.created_at + timedelta(days=1)))
        self.db.commit()

        deleted = self.service.remove(user.id)
        self.assertEqual(deleted.id, user.id)
        self.assertEqual(deleted.email, user.email)
        self.assertEqual(deleted.role.name, "USER")

        with self.assertRaises(NotFoundError):
            self.service.get_by_id(user.id)
        self.assertFalse(credential_store.get_credential(self.db, user.id).ok)
        self.assertEqual(self.db.execute(select(func.count()).select_from(UserSession)).scalar_one(), 0)
        # Roles are never removed with their users.
        self.assertEqual(self.db.execute(select(func.count()).select_from(Role)).scalar_one(), 1)

    def test_missing_user(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.remove("missing")


class TestEmailNormalization(UserDirectoryTestCase):
    """Directory writes store emails in the form the identity provider signs in with."""

    def setUp(self) -> None:
        super().setUp()
        self.identity = DatabaseIdentityProvider(self.db, self.settings)

    def test_created_user_can_sign_in_with_mixed_case_domain(self) -> None:
        user = self.create("Shopper@Example.COM")
        self.assertEqual(user.email, "Shopper@example.com")
        result = self.identity.sign_in_email(email="Shopper@Example.COM", password="password123")
        self.assertEqual(result.user.id, user.id)

    def test_same_mailbox_is_one_account(self) -> None:
        self.create("shopper@Example.com")
        with self.assertRaises(IdentityConflictError):
            self.identity.sign_up_email(name="Shopper", email="shopper@example.com", password="password123")
        with self.assertRaises(ConflictError):
            self.create("shopper@EXAMPLE.com")
        self.assertEqual(self.db.execute(select(func.count()).select_from(User)).scalar_one(), 1)

    def test_invalid_email_is_input_validation_error(self) -> None:
        with self.assertRaises(InputValidationError) as ctx:
            self.create("not-an-email")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.error, "INVALID_EMAIL")
        self.assertEqual(self.db.execute(select(func.count()).select_from(User)).scalar_one(), 0)

    def test_update_normalizes_email(self) -> None:
        user = self.create()
        updated = self.service.update(user.id, email="Renamed@Example.COM")
        self.assertEqual(updated.email, "Renamed@example.com")
        with self.assertRaises(InputValidationError):
            self.service.update(user.id, email="nope")
