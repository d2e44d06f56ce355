"""Pydantic request schemas for the Order Management API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from shared.api import UUIDStr


class AddressSchema(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    line1: str = Field(..., max_length=255)
    line2: str | None = Field(None, max_length=255)
    city: str = Field(..., max_length=100)
    region: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str = Field(..., min_length=2, max_length=2)
    phone: str | None = Field(None, max_length=30)


class ProductSnapshotSchema(BaseModel):
    title: str = Field(..., max_length=255)
    sku: str | None = Field(None, max_length=64)
    size: str | None = Field(None, max_length=20)
    color: str | None = Field(None, max_length=50)


class OrderItemSchema(BaseModel):
    variant_id: UUIDStr
    product: ProductSnapshotSchema | None = None
    quantity: int = Field(..., ge=1)
    unit_price: float = Field(..., ge=0)
    is_gift: bool = False
    gift_message: str | None = Field(None, max_length=500)


class CreateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "nadia@example.com",
                    "items": [
                        {
                            "variant_id": "2f0b6d84-98a4-4c1e-8f0e-0c5d3e4f5a61",
                            "product": {"title": "Linen Relaxed Shirt", "sku": "LIN-SHIRT-WHT-M", "size": "M"},
                            "quantity": 1,
                            "unit_price": 59.0,
                        }
                    ],
                    "shipping_address": {"line1": "12 Galle Road", "city": "Colombo", "country": "LK"},
                    "shipping": 5.0,
                }
            ]
        }
    }

    user_id: UUIDStr | None = None
    guest_token: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=254)
    items: list[OrderItemSchema] = Field(..., min_length=1)
    shipping_address: AddressSchema | None = None
    billing_address: AddressSchema | None = None
    tax: float = Field(0.0, ge=0)
    shipping: float = Field(0.0, ge=0)
    discount: float = Field(0.0, ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    source: str = "web"


class UpdateOrderStatusRequest(BaseModel):
    status: str
    note: str | None = Field(None, max_length=1000)


class CancelOrderRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)


class AddOrderNoteRequest(BaseModel):
    note: str = Field(..., min_length=1, max_length=1000)


class UpdateOrderItemRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class UpdateOrderTotalsRequest(BaseModel):
    tax: float | None = Field(None, ge=0)
    shipping: float | None = Field(None, ge=0)
    discount: float | None = Field(None, ge=0)


class CreateShipmentRequest(BaseModel):
    carrier: str | None = Field(None, max_length=100)
    tracking_no: str | None = Field(None, max_length=255)


class CreateBackorderRequest(BaseModel):
    order_item_id: UUIDStr
    promised_eta: datetime | None = None


class CreatePreorderRequest(BaseModel):
    order_item_id: UUIDStr
    release_date: datetime | None = None
