from uuid import uuid4

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from protean.exceptions import ObjectNotFoundError, ValidationError

from shared.api import UUIDStr, register_envelope_handlers
from shared.auth import Principal, get_current_principal, require_role
from shared.result import CommandResult
from shared.security import create_access_token, create_token_pair


@pytest.fixture(scope="module")
def client():
    app = FastAPI()
    register_envelope_handlers(app)

    @app.get("/things/{thing_id}")
    async def get_thing(thing_id: UUIDStr) -> CommandResult:
        return CommandResult.ok({"thing_id": thing_id})

    @app.post("/invalid")
    async def invalid():
        raise ValidationError({"quantity": ["must be positive"]})

    @app.get("/missing")
    async def missing():
        raise ObjectNotFoundError("Thing does not exist")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("kaboom")

    @app.get("/me")
    async def me(principal: Principal = Depends(get_current_principal)):
        return CommandResult.ok({"user_id": principal.user_id, "role": principal.role})

    @app.get("/admin", dependencies=[Depends(require_role("admin"))])
    async def admin_only():
        return CommandResult.ok("welcome")

    return TestClient(app, raise_server_exceptions=False)


def _bearer(role="customer", subject=None):
    return {"Authorization": f"Bearer {create_access_token(subject or str(uuid4()), role)}"}


class TestErrorEnvelopes:
    def test_validation_error_is_400(self, client):
        response = client.post("/invalid")
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "data": None,
            "error": "quantity: must be positive",
            "errors": ["quantity: must be positive"],
        }

    def test_not_found_is_404(self, client):
        response = client.get("/missing")
        assert response.status_code == 404
        assert response.json()["error"] == "Resource not found"

    def test_malformed_uuid_is_422(self, client):
        response = client.get("/things/not-a-uuid")
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_valid_uuid(self, client):
        thing_id = str(uuid4())
        assert client.get(f"/things/{thing_id}").json()["data"] == {"thing_id": thing_id}

    def test_unknown_route_is_enveloped(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_unhandled_error_is_500(self, client):
        response = client.get("/crash")
        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"


class TestBearerAuth:
    def test_missing_token(self, client):
        response = client.get("/me")
        assert response.status_code == 401
        assert response.json()["error"] == "Not authenticated"

    def test_refresh_token_cannot_authenticate(self, client):
        pair = create_token_pair(str(uuid4()), "customer")
        response = client.get("/me", headers={"Authorization": f"Bearer {pair['refresh_token']}"})
        assert response.status_code == 401

    def test_principal_from_token(self, client):
        user_id = str(uuid4())
        response = client.get("/me", headers=_bearer("staff", user_id))
        assert response.json()["data"] == {"user_id": user_id, "role": "staff"}

    def test_role_is_enforced(self, client):
        assert client.get("/admin", headers=_bearer("customer")).status_code == 403
        assert client.get("/admin", headers=_bearer("admin")).status_code == 200
