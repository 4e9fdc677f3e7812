"""Shared fixtures: in-memory SQLite store, fast settings and an API client."""

import unittest
from collections.abc import Iterator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings
from app.core.database import get_db  # also registers the SQLite foreign-key listener
from app.models import Base

ADMIN_EMAIL = "admin@example.com"


def make_settings(**overrides) -> Settings:
    values = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "ADMIN_EMAIL": ADMIN_EMAIL,
        "BCRYPT_ROUNDS": 4,
        "JWT_SECRET": "test-secret",
    }
    values.update(overrides)
    return Settings(**values)


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema per test on a single shared in-memory connection."""

    settings_overrides: dict = {}

    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        self.db: Session = self.Session()
        self.settings = make_settings(**self.settings_overrides)

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient wired to the test store and settings."""

    def setUp(self) -> None:
        super().setUp()
        from app.main import app

        def override_get_db() -> Iterator[Session]:
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        self.app = app
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app, raise_server_exceptions=False)

    def tearDown(self) -> None:
        self.app.dependency_overrides.clear()
        super().tearDown()

    def signup(self, email: str, password: str = "password123", name: str = "Test User"):
        return self.client.post(
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "name": name},
        )

    def auth_headers(self, email: str = "operator@example.com") -> dict[str, str]:
        """Sign up a fresh user and return its bearer header."""
        response = self.signup(email)
        self.assertEqual(response.status_code, 201, response.text)
        return {"Authorization": f"Bearer {response.json()['token']}"}
