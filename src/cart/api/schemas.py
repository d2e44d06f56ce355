"""Pydantic request schemas for the Cart API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from shared.api import UUIDStr

# --- Cart ---


class CreateCartRequest(BaseModel):
    user_id: UUIDStr | None = None
    guest_token: str | None = Field(None, max_length=255)
    currency: str = Field("USD", min_length=3, max_length=3)


class AddToCartRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "variant_id": "2f0b6d84-98a4-4c1e-8f0e-0c5d3e4f5a61",
                    "product_id": "8a7d8b0e-1c2f-4b3a-9d4e-5f6a7b8c9d0e",
                    "quantity": 2,
                    "unit_price": 59.0,
                    "is_gift": True,
                    "gift_message": "Happy birthday!",
                }
            ]
        }
    }

    variant_id: UUIDStr
    product_id: UUIDStr | None = None
    quantity: int = Field(..., ge=1)
    unit_price: float = Field(..., ge=0)
    is_gift: bool = False
    gift_message: str | None = Field(None, max_length=500)


class UpdateCartItemRequest(BaseModel):
    quantity: int | None = Field(None, ge=1)
    is_gift: bool | None = None
    gift_message: str | None = Field(None, max_length=500)


class ApplyPromoRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50, description="Promotion code; its terms come from the promotion")


class TransferGuestCartRequest(BaseModel):
    guest_token: str = Field(..., min_length=1, max_length=255)
    user_id: UUIDStr


# --- Checkout ---


class InitializeCheckoutRequest(BaseModel):
    cart_id: UUIDStr
    user_id: UUIDStr | None = None
    guest_token: str | None = Field(None, max_length=255)


# --- Reservations ---


class CreateReservationRequest(BaseModel):
    cart_id: UUIDStr
    variant_id: UUIDStr
    quantity: int = Field(..., ge=1)
    duration_minutes: int | None = Field(None, ge=1)


class ExtendReservationRequest(BaseModel):
    minutes: int = Field(..., gt=0)


class RenewReservationRequest(BaseModel):
    duration_minutes: int | None = Field(None, ge=1)
