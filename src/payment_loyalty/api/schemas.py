"""Pydantic request schemas for the Payment & Loyalty API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from shared.api import UUIDStr


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class CreatePaymentIntentRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "6a1f0c3e-5b7d-4e2a-9c8b-1d2e3f4a5b6c",
                    "amount": 89.5,
                    "currency": "USD",
                    "provider": "stripe",
                    "idempotency_key": "checkout-7f3a",
                }
            ]
        }
    }

    order_id: UUIDStr | None = None
    amount: float = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    provider: str = Field(..., max_length=20)
    idempotency_key: str = Field(..., min_length=1, max_length=255)


class FailPaymentRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class RefundPaymentRequest(BaseModel):
    amount: float | None = Field(None, gt=0)
    reason: str | None = Field(None, max_length=500)


class PaymentWebhookRequest(BaseModel):
    event_type: str = Field(..., max_length=100)
    intent_id: UUIDStr
    payload: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Gift cards
# ---------------------------------------------------------------------------
class IssueGiftCardRequest(BaseModel):
    amount: float = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    code: str | None = Field(None, max_length=50)
    expires_at: datetime | None = None
    recipient_email: str | None = Field(None, max_length=254)
    recipient_name: str | None = Field(None, max_length=200)
    message: str | None = None


class GiftCardAmountRequest(BaseModel):
    amount: float = Field(..., gt=0)
    order_id: UUIDStr | None = None


# ---------------------------------------------------------------------------
# Loyalty
# ---------------------------------------------------------------------------
class EnrollRequest(BaseModel):
    user_id: UUIDStr


class AwardPointsRequest(BaseModel):
    user_id: UUIDStr
    points: int = Field(..., gt=0)
    order_id: UUIDStr | None = None
    note: str | None = Field(None, max_length=500)


class AwardOrderPointsRequest(BaseModel):
    user_id: UUIDStr
    order_id: UUIDStr
    order_total: float = Field(..., ge=0)


class RedeemPointsRequest(BaseModel):
    user_id: UUIDStr
    points: int = Field(..., gt=0)
    order_id: UUIDStr | None = None


class AdjustPointsRequest(BaseModel):
    user_id: UUIDStr
    points_delta: int
    note: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Promotions
# ---------------------------------------------------------------------------
class CreatePromotionRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    promo_type: str = Field(..., max_length=20)
    value: float = Field(0.0, ge=0)
    min_order_amount: float | None = Field(None, ge=0)
    max_discount: float | None = Field(None, ge=0, description="Caps percentage discounts")
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    usage_limit: int | None = Field(None, ge=1)
    description: str | None = Field(None, max_length=500)


class EvaluatePromotionRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    order_amount: float = Field(..., ge=0)
    shipping_amount: float = Field(0.0, ge=0)


class RecordUsageRequest(BaseModel):
    order_id: UUIDStr
    discount_amount: float = Field(..., ge=0)


# ---------------------------------------------------------------------------
# BNPL
# ---------------------------------------------------------------------------
class CreateBnplRequest(BaseModel):
    intent_id: UUIDStr
    provider: str = Field(..., min_length=1, max_length=50)
    installments: int | None = Field(None, ge=2, le=12)
    interval_days: int | None = Field(None, ge=1)


class BnplActionRequest(BaseModel):
    action: str = Field(..., max_length=20)
