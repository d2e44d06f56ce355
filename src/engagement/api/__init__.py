"""Engagement API package."""

from engagement.api.routes import (
    appointment_router,
    newsletter_router,
    notification_router,
    reminder_router,
    review_router,
    wishlist_router,
)

__all__ = [
    "wishlist_router",
    "review_router",
    "newsletter_router",
    "reminder_router",
    "appointment_router",
    "notification_router",
]
