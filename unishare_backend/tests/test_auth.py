"""Tests covering registration, login and bearer-token authentication."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.models.user import UserRole
from conftest import PASSWORD, auth_headers


def _register(client: TestClient, email: str):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": PASSWORD, "full_name": "Ada Lovelace"},
    )


def test_register_returns_user_without_password(client: TestClient) -> None:
    response = _register(client, "Ada@Example.com")
    assert response.status_code == 201
    payload = response.json()
    assert payload["email"] == "ada@example.com"
    assert payload["role"] == "USER"
    assert payload["status"] == "ACTIVE"
    assert payload["uploads_count"] == 0
    assert "password" not in payload
    assert "hashed_password" not in payload


def test_register_same_email_twice_conflicts_case_insensitively(client: TestClient) -> None:
    assert _register(client, "ada@example.com").status_code == 201

    again = _register(client, "ADA@example.COM")
    assert again.status_code == 409
    assert again.json()["detail"] == "Email already registered."


def test_register_increments_active_users(client: TestClient, make_user) -> None:
    _, admin = make_user("admin@example.com", role=UserRole.ADMIN)
    _register(client, "one@example.com")
    _register(client, "two@example.com")

    stats = client.get("/api/statistics/platform", headers=admin).json()
    assert stats["active_users"] == 3


def test_login_returns_token_and_projection(client: TestClient) -> None:
    _register(client, "ada@example.com")

    response = client.post(
        "/api/auth/login", json={"email": "ADA@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["token_type"] == "bearer"
    assert payload["access_token"]
    assert payload["user"]["email"] == "ada@example.com"
    assert "hashed_password" not in payload["user"]


def test_login_wrong_password_and_unknown_email(client: TestClient) -> None:
    _register(client, "ada@example.com")

    wrong = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope-nope"})
    unknown = client.post("/api/auth/login", json={"email": "bob@example.com", "password": PASSWORD})
    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.json()["detail"] == unknown.json()["detail"] == "Invalid email or password."


def test_login_blocked_account_has_distinct_message(client: TestClient, make_user) -> None:
    user_id, _ = make_user("ada@example.com")
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    assert client.post(f"/api/admin/users/{user_id}/block", headers=moderator).status_code == 200

    response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is blocked. Contact an administrator."


def test_protected_route_requires_valid_token(client: TestClient, make_user) -> None:
    make_user("ada@example.com")

    missing = client.get("/api/users/me/profile")
    assert missing.status_code == 401
    assert missing.headers["www-authenticate"] == "Bearer"

    garbage = client.get("/api/users/me/profile", headers={"Authorization": "Bearer not-a-token"})
    assert garbage.status_code == 401
    assert garbage.json()["detail"] == "Invalid token."

    ok = client.get("/api/users/me/profile", headers=auth_headers(client, "ada@example.com"))
    assert ok.status_code == 200


def test_token_for_deleted_user_is_rejected(client: TestClient) -> None:
    token = create_access_token(999, "ghost@example.com", "USER")
    response = client.get("/api/users/me/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found."
