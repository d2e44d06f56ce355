"""Pydantic request schemas for the Analytics API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from shared.api import UUIDStr


class VisitorContext(BaseModel):
    user_id: UUIDStr | None = None
    guest_token: str | None = Field(None, max_length=255)
    session_id: str = Field(..., min_length=1, max_length=255)
    referrer: str | None = Field(None, max_length=500)


class TrackEventRequest(VisitorContext):
    event_type: str = Field(..., max_length=30)
    product_id: UUIDStr | None = None
    variant_id: UUIDStr | None = None
    cart_id: UUIDStr | None = None
    event_data: dict[str, Any] | None = None


class TrackProductViewRequest(VisitorContext):
    product_id: UUIDStr
    variant_id: UUIDStr | None = None
    source: str | None = Field(None, max_length=30)
    search_query: str | None = Field(None, max_length=255)
    category_id: UUIDStr | None = None


class PurchasedItem(BaseModel):
    product_id: UUIDStr
    variant_id: UUIDStr | None = None
    quantity: int = Field(1, ge=1)
    price: float = Field(..., ge=0)


class TrackPurchaseRequest(VisitorContext):
    order_id: UUIDStr
    items: list[PurchasedItem] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
