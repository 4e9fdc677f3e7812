"""Tests for the role registry: idempotent get-or-create by name."""

import os
import tempfile
import threading
import unittest

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from app.core.database import transaction
from app.models import Base, Role
from app.services.role_registry import RoleName, default_description, resolve_role
from tests.support import DatabaseTestCase


class TestResolveRole(DatabaseTestCase):
    def _count(self, name: str) -> int:
        return self.db.execute(select(func.count()).select_from(Role).where(Role.name == name)).scalar_one()

    def test_creates_missing_role_with_catalog_description(self) -> None:
        role = resolve_role(self.db, RoleName.USER)
        self.db.commit()
        self.assertEqual(role.name, "USER")
        self.assertEqual(role.description, "Regular user")
        self.assertEqual(self._count("USER"), 1)

    def test_second_call_returns_same_row(self) -> None:
        first = resolve_role(self.db, "ADMIN")
        self.db.commit()
        first_id = first.id
        second = resolve_role(self.db, "ADMIN")
        self.db.commit()
        self.assertEqual(second.id, first_id)
        self.assertEqual(self._count("ADMIN"), 1)

    def test_existing_description_is_left_unchanged(self) -> None:
        resolve_role(self.db, "PRODUCT_MANAGER", "Original")
        self.db.commit()
        role = resolve_role(self.db, "PRODUCT_MANAGER", "Replacement")
        self.db.commit()
        self.assertEqual(role.description, "Original")

    def test_unknown_name_gets_empty_default_description(self) -> None:
        self.assertEqual(default_description("AUDITOR"), "")
        role = resolve_role(self.db, "AUDITOR")
        self.assertEqual(role.description, "")


class TestResolveRoleConcurrently(unittest.TestCase):
    """Parallel callers on separate connections converge on one role row."""

    WORKERS = 8

    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.engine = create_engine(
            f"sqlite:///{os.path.join(self.tmpdir.name, 'roles.db')}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def tearDown(self) -> None:
        self.engine.dispose()
        self.tmpdir.cleanup()

    def test_one_row_and_one_id(self) -> None:
        barrier = threading.Barrier(self.WORKERS)
        ids: list[str] = []
        errors: list[BaseException] = []
        lock = threading.Lock()

        def worker() -> None:
            db = self.Session()
            try:
                barrier.wait()
                with transaction(db):
                    role_id = resolve_role(db, "USER").id
                with lock:
                    ids.append(role_id)
            except BaseException as e:
                with lock:
                    errors.append(e)
            finally:
                db.close()

        threads = [threading.Thread(target=worker) for _ in range(self.WORKERS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        self.assertEqual(errors, [])
        self.assertEqual(len(ids), self.WORKERS)
        self.assertEqual(len(set(ids)), 1)
        with self.Session() as db:
            count = db.execute(select(func.count()).select_from(Role).where(Role.name == "USER")).scalar_one()
        self.assertEqual(count, 1)
