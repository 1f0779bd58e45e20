from __future__ import annotations

import os
from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

# Environment must be in place before the app modules are imported
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_32_chars_minimum")
os.environ.setdefault("ACCESS_TOKEN_TTL_SECONDS", "900")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from huddle.core.config import Settings  # noqa: E402
from huddle.db import Database  # noqa: E402
from huddle.main import create_app  # noqa: E402
from huddle.models import User  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def database():
    db = Database("sqlite+pysqlite:///:memory:")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def app(settings: Settings, database: Database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db_session(database: Database):
    db = database.session()
    try:
        yield db
    finally:
        db.close()


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class Account:
    def __init__(self, user_id: int, email: str, token: str) -> None:
        self.user_id = user_id
        self.email = email
        self.token = token

    @property
    def headers(self) -> dict[str, str]:
        return auth_headers(self.token)


@pytest.fixture
def make_account(client: TestClient) -> Callable[[str], Account]:
    def _make(email: str, password: str = "StrongPass123") -> Account:
        resp = client.post("/v1/auth/signup", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        login = client.post("/v1/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        body = login.json()
        return Account(user_id=body["user_id"], email=email, token=body["access_token"])

    return _make


@pytest.fixture
def make_user(db_session) -> Callable[[str], User]:
    """Insert a user row directly, for service-level tests."""

    def _make(email: str) -> User:
        user = User(email=email, password_hash="not-a-real-hash")
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def create_event(client: TestClient):
    def _create(account: Account, **overrides):
        payload = {"title": "Test Event", "date": "2024-06-01T10:00:00Z"}
        payload.update(overrides)
        resp = client.post("/v1/events", json=payload, headers=account.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
