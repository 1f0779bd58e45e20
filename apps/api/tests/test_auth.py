from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from huddle.auth.jwt import create_access_token, verify_access_token
from huddle.models import User


def test_signup_then_login_works(client: TestClient):
    resp = client.post("/v1/auth/signup", json={"email": "Reg1@Example.com", "password": "StrongPass123"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "reg1@example.com"
    assert "password" not in body
    assert "password_hash" not in body

    login = client.post("/v1/auth/login", json={"email": "reg1@example.com", "password": "StrongPass123"})
    assert login.status_code == 200
    tokens = login.json()
    assert tokens["access_token"]
    assert tokens["token_type"] == "bearer"
    assert tokens["user_id"] == body["id"]


def test_signup_duplicate_email_is_generic_conflict(client: TestClient, db_session):
    payload = {"email": "dup@example.com", "password": "StrongPass123"}
    assert client.post("/v1/auth/signup", json=payload).status_code == 201

    again = client.post("/v1/auth/signup", json=payload)
    assert again.status_code == 409
    detail = again.json()["detail"]
    assert detail["code"] == "ACCOUNT_EXISTS"
    assert "email" not in detail["message"]

    count = db_session.scalar(select(func.count()).select_from(User).where(User.email == "dup@example.com"))
    assert count == 1


def test_signup_rejects_short_password(client: TestClient):
    resp = client.post("/v1/auth/signup", json={"email": "short@example.com", "password": "abc"})
    assert resp.status_code == 422


def test_login_wrong_password_is_unauthorized(client: TestClient, make_account):
    make_account("wrongpw@example.com")
    resp = client.post("/v1/auth/login", json={"email": "wrongpw@example.com", "password": "nope-nope-nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"]["message"] == "invalid credentials"


def test_login_unknown_email_is_unauthorized(client: TestClient):
    resp = client.post("/v1/auth/login", json={"email": "ghost@example.com", "password": "StrongPass123"})
    assert resp.status_code == 401


def test_me_returns_current_user(client: TestClient, make_account):
    account = make_account("me@example.com")
    resp = client.get("/v1/me", headers=account.headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == account.user_id
    assert resp.json()["email"] == "me@example.com"


def test_missing_token_is_unauthenticated(client: TestClient):
    resp = client.get("/v1/events/organized")
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"
    assert resp.json()["detail"]["code"] == "UNAUTHENTICATED"


def test_malformed_header_is_unauthenticated(client: TestClient):
    resp = client.get("/v1/events/organized", headers={"Authorization": "Token abc"})
    assert resp.status_code == 401


def test_garbage_token_is_unauthenticated(client: TestClient):
    resp = client.get("/v1/events/organized", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401


def test_expired_token_is_unauthenticated(client: TestClient, settings, make_account):
    account = make_account("expired@example.com")
    token = create_access_token(account.user_id, ttl_seconds=-60, settings=settings)
    resp = client.get("/v1/events/organized", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_token_round_trip_yields_numeric_identity(settings):
    token = create_access_token(42, settings=settings)
    identity = verify_access_token(token, settings=settings)
    assert identity.user_id == 42
