"""Integration tests for the analytics API."""

from uuid import uuid4

import pytest
from analytics.api import router
from fastapi import FastAPI
from fastapi.testclient import TestClient
from shared.api import register_envelope_handlers
from shared.security import create_access_token


@pytest.fixture()
def client():
    app = FastAPI()
    register_envelope_handlers(app)
    app.include_router(router)
    return TestClient(app)


def _staff():
    return {"Authorization": f"Bearer {create_access_token(str(uuid4()), 'staff')}"}


class TestTrackingEndpoints:
    def test_product_view_then_report(self, client):
        product_id = str(uuid4())
        response = client.post(
            "/analytics/events/product-view",
            json={"product_id": product_id, "session_id": "s-9", "guest_token": "guest-9", "source": "search"},
            headers={"User-Agent": "pytest"},
        )
        assert response.status_code == 201

        report = client.get(f"/analytics/products/{product_id}", headers=_staff()).json()["data"]
        assert report["views"] == 1
        top = client.get("/analytics/products/top-viewed", headers=_staff()).json()["data"]
        assert top[0]["product_id"] == product_id

    def test_purchase(self, client):
        body = {
            "order_id": str(uuid4()),
            "session_id": "s-9",
            "user_id": str(uuid4()),
            "items": [{"product_id": str(uuid4()), "quantity": 2, "price": 30.0}],
            "total_amount": 60.0,
        }
        response = client.post("/analytics/events/purchase", json=body)
        assert response.status_code == 201
        assert len(response.json()["data"]["event_ids"]) == 1

    def test_missing_visitor_identity(self, client):
        response = client.post("/analytics/events", json={"event_type": "search", "session_id": "s-9"})
        assert response.status_code == 400
        assert response.json()["error"].startswith("user_id:")

    def test_reports_require_staff(self, client):
        assert client.get("/analytics/daily").status_code == 401
