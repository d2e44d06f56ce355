"""Pydantic request schemas for the User Management API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "nadia@example.com",
                    "password": "linen2024",
                    "first_name": "Nadia",
                    "last_name": "Perera",
                }
            ]
        }
    }

    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)
    phone: str | None = Field(None, max_length=20)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)


class GuestRequest(BaseModel):
    email: str = Field(..., max_length=254)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str


class UpdateProfileRequest(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    locale: str | None = Field(None, max_length=5)
    currency: str | None = Field(None, max_length=3)
    style_preferences: dict[str, Any] | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., max_length=128)
    new_password: str = Field(..., max_length=128)


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., max_length=254)
    new_password: str = Field(..., max_length=128)


class AddressRequest(BaseModel):
    address_type: str = Field("shipping", max_length=20)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    line1: str = Field(..., min_length=1, max_length=255)
    line2: str | None = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    region: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str = Field(..., min_length=2, max_length=2)
    phone: str | None = Field(None, max_length=20)
    is_default: bool = False


class UpdateAddressRequest(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    line1: str | None = Field(None, max_length=255)
    line2: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    region: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, min_length=2, max_length=2)
    phone: str | None = Field(None, max_length=20)


class PaymentMethodRequest(BaseModel):
    method_type: str = Field(..., max_length=20)
    provider_ref: str | None = Field(None, max_length=255)
    brand: str | None = Field(None, max_length=50)
    last4: str | None = Field(None, max_length=4)
    exp_month: int | None = Field(None, ge=1, le=12)
    exp_year: int | None = None
    is_default: bool = False


class BlockUserRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class ChangeRoleRequest(BaseModel):
    role: str = Field(..., max_length=20)
