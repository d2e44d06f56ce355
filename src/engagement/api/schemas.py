"""Pydantic request schemas for the Engagement API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from shared.api import UUIDStr


# ---------------------------------------------------------------------------
# Wishlists
# ---------------------------------------------------------------------------
class CreateWishlistRequest(BaseModel):
    user_id: UUIDStr | None = None
    guest_token: str | None = Field(None, max_length=255)
    name: str | None = Field(None, max_length=100)
    description: str | None = None
    is_default: bool = False
    is_public: bool = False


class WishlistItemRequest(BaseModel):
    variant_id: UUIDStr
    product_id: UUIDStr | None = None
    note: str | None = Field(None, max_length=500)


class UpdateWishlistRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    description: str | None = None
    is_public: bool | None = None
    is_default: bool | None = None


class TransferWishlistsRequest(BaseModel):
    guest_token: str = Field(..., min_length=1, max_length=255)
    user_id: UUIDStr


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class CreateReviewRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "0b0f3f5e-8f4e-4d0c-9b1b-5b8d5f1c2a11",
                    "user_id": "6a3c0a5e-2c1f-4f39-8d7a-b1f1b4f7a9c2",
                    "rating": 5,
                    "title": "Perfect fit",
                    "body": "True to size and the linen is lovely.",
                }
            ]
        }
    }

    product_id: UUIDStr
    user_id: UUIDStr
    rating: int = Field(..., ge=1, le=5)
    title: str | None = Field(None, max_length=200)
    body: str | None = None


class ModerateReviewRequest(BaseModel):
    action: str = Field(..., max_length=20)
    note: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Newsletter & reminders
# ---------------------------------------------------------------------------
class NewsletterRequest(BaseModel):
    email: str = Field(..., max_length=254)
    source: str | None = Field(None, max_length=50)


class CreateReminderRequest(BaseModel):
    reminder_type: str = Field(..., max_length=20)
    variant_id: UUIDStr
    contact: str = Field(..., max_length=254)
    channel: str | None = Field(None, max_length=10)
    user_id: UUIDStr | None = None


# ---------------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------------
class CreateAppointmentRequest(BaseModel):
    user_id: UUIDStr
    appointment_type: str = Field(..., max_length=20)
    start_at: datetime
    end_at: datetime
    location_id: UUIDStr | None = None
    notes: str | None = None


class RescheduleAppointmentRequest(BaseModel):
    start_at: datetime
    end_at: datetime


class CancelAppointmentRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class ScheduleNotificationRequest(BaseModel):
    notification_type: str = Field(..., max_length=50)
    channel: str = Field(..., max_length=10)
    recipient: str | None = Field(None, max_length=254)
    user_id: UUIDStr | None = None
    template_id: str | None = Field(None, max_length=100)
    payload: dict[str, Any] | None = None
    scheduled_at: datetime | None = None


class NotificationFailedRequest(BaseModel):
    error: str | None = Field(None, max_length=1000)


class RetryNotificationRequest(BaseModel):
    scheduled_at: datetime | None = None
