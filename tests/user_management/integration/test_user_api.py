"""Integration tests for the user management API."""

from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from shared.api import register_envelope_handlers
from shared.security import create_access_token
from user_management.api import auth_router, user_router


@pytest.fixture()
def client():
    app = FastAPI()
    register_envelope_handlers(app)
    app.include_router(auth_router)
    app.include_router(user_router)
    return TestClient(app)


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def _signup(client, email="nadia@example.com", password="linen2024"):
    response = client.post("/auth/register", json={"email": email, "password": password, "first_name": "Nadia"})
    assert response.status_code == 201
    return response.json()["data"]


class TestAuthEndpoints:
    def test_register_returns_tokens(self, client):
        data = _signup(client)
        assert data["token_type"] == "bearer"
        me = client.get("/users/me", headers=_bearer(data["access_token"])).json()["data"]
        assert me["email"] == "nadia@example.com"
        assert "password_hash" not in me

    def test_weak_password(self, client):
        response = client.post("/auth/register", json={"email": "a@example.com", "password": "weak"})
        assert response.status_code == 400
        assert response.json()["error"].startswith("password:")

    def test_login_and_refresh(self, client):
        _signup(client)
        login = client.post("/auth/login", json={"email": "nadia@example.com", "password": "linen2024"}).json()
        refreshed = client.post("/auth/refresh", json={"refresh_token": login["data"]["refresh_token"]})
        assert refreshed.status_code == 200
        assert refreshed.json()["data"]["user_id"] == login["data"]["user_id"]

    def test_bad_login(self, client):
        response = client.post("/auth/login", json={"email": "nadia@example.com", "password": "linen2024"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_guest_tokens(self, client):
        data = client.post("/auth/guest", json={"email": "guest@example.com"}).json()["data"]
        assert data["role"] == "guest"

    def test_me_requires_token(self, client):
        assert client.get("/users/me").status_code == 401


class TestSelfServiceEndpoints:
    def test_profile_and_addresses(self, client):
        token = _signup(client)["access_token"]
        profile = client.put(
            "/users/me/profile", json={"currency": "eur", "style_preferences": {"fit": "oversized"}}, headers=_bearer(token)
        ).json()["data"]
        assert profile["currency"] == "EUR"
        assert profile["style_preferences"] == {"fit": "oversized"}

        response = client.post(
            "/users/me/addresses", json={"line1": "12 Galle Rd", "city": "Colombo", "country": "LK"}, headers=_bearer(token)
        )
        assert response.status_code == 201
        addresses = client.get("/users/me/addresses", headers=_bearer(token)).json()["data"]
        assert addresses[0]["is_default"] is True

    def test_change_password(self, client):
        token = _signup(client)["access_token"]
        response = client.put(
            "/users/me/password",
            json={"current_password": "linen2024", "new_password": "cotton2025"},
            headers=_bearer(token),
        )
        assert response.status_code == 200
        login = client.post("/auth/login", json={"email": "nadia@example.com", "password": "cotton2025"})
        assert login.status_code == 200


class TestAdminEndpoints:
    def test_customers_cannot_list_users(self, client):
        token = _signup(client)["access_token"]
        assert client.get("/users", headers=_bearer(token)).status_code == 403

    def test_block_user(self, client):
        user_id = _signup(client)["user_id"]
        admin = _bearer(create_access_token(str(uuid4()), "admin"))
        blocked = client.post(f"/users/{user_id}/block", json={"reason": "Chargebacks"}, headers=admin).json()
        assert blocked["data"]["status"] == "blocked"
        login = client.post("/auth/login", json={"email": "nadia@example.com", "password": "linen2024"})
        assert login.json()["error"] == "account: Account is blocked"

    def test_role_change_requires_admin(self, client):
        user_id = _signup(client)["user_id"]
        staff = _bearer(create_access_token(str(uuid4()), "staff"))
        assert client.put(f"/users/{user_id}/role", json={"role": "admin"}, headers=staff).status_code == 403
        admin = _bearer(create_access_token(str(uuid4()), "admin"))
        assert client.put(f"/users/{user_id}/role", json={"role": "staff"}, headers=admin).json()["data"]["role"] == "staff"

    def test_unknown_user_returns_404(self, client):
        admin = _bearer(create_access_token(str(uuid4()), "admin"))
        assert client.get(f"/users/{uuid4()}", headers=admin).status_code == 404

    def test_email_verification_is_a_staff_action(self, client):
        data = _signup(client)
        user_id = data["user_id"]
        own = _bearer(data["access_token"])
        assert client.post(f"/users/{user_id}/verify-email", headers=own).status_code == 403
        assert client.post("/users/me/verify-email", headers=own).status_code != 200

        staff = _bearer(create_access_token(str(uuid4()), "staff"))
        response = client.post(f"/users/{user_id}/verify-email", headers=staff)
        assert response.json()["data"] == {"user_id": user_id, "email_verified": True}
        assert client.get("/users/me", headers=own).json()["data"]["email_verified"] is True

    def test_long_password_is_rejected_not_a_crash(self, client):
        response = client.post("/auth/register", json={"email": "long@example.com", "password": "a1" * 40})
        assert response.status_code == 400
        assert response.json()["error"] == "password: Password must be at most 72 bytes long"

        _signup(client)
        login = client.post("/auth/login", json={"email": "nadia@example.com", "password": "z9" * 40})
        assert login.status_code == 400
        assert login.json()["error"] == "credentials: Invalid email or password"
