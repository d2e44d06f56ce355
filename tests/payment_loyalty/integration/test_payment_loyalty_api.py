"""Integration tests for the payment, gift card, loyalty, promotion and BNPL API."""

from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from payment_loyalty.api import bnpl_router, gift_card_router, loyalty_router, payment_router, promotion_router
from shared.api import register_envelope_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_envelope_handlers(app)
    for router in (payment_router, gift_card_router, loyalty_router, promotion_router, bnpl_router):
        app.include_router(router)
    return TestClient(app)


def _intent(client, amount=60.0, key=None):
    response = client.post(
        "/payments/intents",
        json={"amount": amount, "provider": "paypal", "idempotency_key": key or str(uuid4())},
    )
    assert response.status_code == 201
    return response.json()["data"]["intent_id"]


class TestPaymentEndpoints:
    def test_capture_flow(self, client):
        intent_id = _intent(client)
        assert client.post(f"/payments/intents/{intent_id}/authorize").json()["data"]["status"] == "authorized"
        assert client.post(f"/payments/intents/{intent_id}/capture").json()["data"]["status"] == "captured"

        body = client.get(f"/payments/intents/{intent_id}").json()
        assert body["data"]["refundable_amount"] == 60.0

    def test_invalid_transition_returns_400(self, client):
        intent_id = _intent(client)
        response = client.post(f"/payments/intents/{intent_id}/capture")
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_intent_returns_404(self, client):
        response = client.get(f"/payments/intents/{uuid4()}")
        assert response.status_code == 404

    def test_webhook(self, client):
        intent_id = _intent(client)
        response = client.post(
            "/payments/webhooks",
            json={"event_type": "payment.failed", "intent_id": intent_id, "payload": {"reason": "Declined"}},
        )
        assert response.json()["data"]["status"] == "processed"


class TestGiftCardEndpoints:
    def test_issue_and_check_balance(self, client):
        response = client.post("/gift-cards", json={"amount": 40.0, "code": "gift-40"})
        assert response.status_code == 201
        card_id = response.json()["data"]["gift_card_id"]

        client.post(f"/gift-cards/{card_id}/redeem", json={"amount": 15.0})
        body = client.get("/gift-cards/GIFT-40/balance").json()
        assert body["data"]["balance"] == 25.0


class TestLoyaltyEndpoints:
    def test_award_and_read_account(self, client):
        user_id = str(uuid4())
        client.post("/loyalty/award", json={"user_id": user_id, "points": 1500})
        body = client.get(f"/loyalty/accounts/{user_id}").json()
        assert body["data"]["tier"] == "silver"


class TestPromotionEndpoints:
    def test_create_and_evaluate(self, client):
        response = client.post("/promotions", json={"code": "welcome", "promo_type": "fixed_amount", "value": 15})
        assert response.status_code == 201

        body = client.post("/promotions/evaluate", json={"code": "WELCOME", "order_amount": 100}).json()
        assert body["data"]["discount_amount"] == 15.0


class TestBnplEndpoints:
    def test_create_and_approve(self, client):
        intent_id = _intent(client, amount=80.0)
        bnpl_id = client.post("/bnpl", json={"intent_id": intent_id, "provider": "koko"}).json()["data"]["bnpl_id"]

        response = client.put(f"/bnpl/{bnpl_id}/status", json={"action": "reject"})
        assert response.json()["data"]["status"] == "rejected"

        response = client.put(f"/bnpl/{bnpl_id}/status", json={"action": "approve"})
        assert response.status_code == 400
