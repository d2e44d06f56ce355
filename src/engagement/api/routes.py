"""FastAPI routes for the Engagement domain."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from engagement import queries
from engagement.api.schemas import (
    CancelAppointmentRequest,
    CreateAppointmentRequest,
    CreateReminderRequest,
    CreateReviewRequest,
    CreateWishlistRequest,
    ModerateReviewRequest,
    NewsletterRequest,
    NotificationFailedRequest,
    RescheduleAppointmentRequest,
    RetryNotificationRequest,
    ScheduleNotificationRequest,
    TransferWishlistsRequest,
    UpdateWishlistRequest,
    WishlistItemRequest,
)
from engagement.appointment.appointment import (
    CancelAppointment,
    CompleteAppointment,
    CreateAppointment,
    RescheduleAppointment,
)
from engagement.newsletter.subscription import SubscribeToNewsletter, UnsubscribeFromNewsletter
from engagement.notification.notification import (
    CancelNotification,
    MarkNotificationFailed,
    MarkNotificationSent,
    RetryNotification,
    ScheduleNotification,
)
from engagement.reminder.reminder import CreateReminder, MarkReminderSent, UnsubscribeReminder
from engagement.review.moderation import CreateProductReview, ModerateReview
from engagement.wishlist.management import (
    AddToWishlist,
    CreateWishlist,
    DeleteWishlist,
    RemoveFromWishlist,
    TransferGuestWishlists,
    UpdateWishlist,
)
from shared.api import UUIDStr
from shared.auth import require_role
from shared.result import CommandResult


def _process(command):
    return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Wishlist Router
# ---------------------------------------------------------------------------
wishlist_router = APIRouter(prefix="/wishlists", tags=["wishlists"])


@wishlist_router.post("", status_code=201, response_model=CommandResult)
async def create_wishlist(body: CreateWishlistRequest) -> CommandResult:
    wishlist_id = _process(CreateWishlist(**body.model_dump()))
    return CommandResult.ok({"wishlist_id": wishlist_id})


@wishlist_router.get("", response_model=CommandResult)
async def list_wishlists(user_id: UUIDStr | None = None, guest_token: str | None = None) -> CommandResult:
    return CommandResult.ok(queries.list_wishlists(user_id, guest_token))


@wishlist_router.post("/transfer", response_model=CommandResult)
async def transfer_wishlists(body: TransferWishlistsRequest) -> CommandResult:
    moved = _process(TransferGuestWishlists(**body.model_dump()))
    return CommandResult.ok({"transferred": moved})


@wishlist_router.get("/{wishlist_id}", response_model=CommandResult)
async def get_wishlist(wishlist_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_wishlist(wishlist_id))


@wishlist_router.put("/{wishlist_id}", response_model=CommandResult)
async def update_wishlist(wishlist_id: UUIDStr, body: UpdateWishlistRequest) -> CommandResult:
    _process(UpdateWishlist(wishlist_id=wishlist_id, **body.model_dump()))
    return CommandResult.ok(queries.get_wishlist(wishlist_id))


@wishlist_router.delete("/{wishlist_id}", response_model=CommandResult)
async def delete_wishlist(wishlist_id: UUIDStr) -> CommandResult:
    _process(DeleteWishlist(wishlist_id=wishlist_id))
    return CommandResult.ok({"wishlist_id": wishlist_id, "deleted": True})


@wishlist_router.post("/{wishlist_id}/items", status_code=201, response_model=CommandResult)
async def add_wishlist_item(wishlist_id: UUIDStr, body: WishlistItemRequest) -> CommandResult:
    item_id = _process(AddToWishlist(wishlist_id=wishlist_id, **body.model_dump()))
    return CommandResult.ok({"item_id": item_id})


@wishlist_router.delete("/{wishlist_id}/items/{variant_id}", response_model=CommandResult)
async def remove_wishlist_item(wishlist_id: UUIDStr, variant_id: UUIDStr) -> CommandResult:
    _process(RemoveFromWishlist(wishlist_id=wishlist_id, variant_id=variant_id))
    return CommandResult.ok(queries.get_wishlist(wishlist_id))


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.post("", status_code=201, response_model=CommandResult)
async def create_review(body: CreateReviewRequest) -> CommandResult:
    review_id = _process(CreateProductReview(**body.model_dump()))
    return CommandResult.ok({"review_id": review_id, "status": "pending"})


@review_router.get("", response_model=CommandResult)
async def list_reviews(
    product_id: UUIDStr | None = None,
    status: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> CommandResult:
    return CommandResult.ok(queries.list_reviews(product_id, status, page, page_size))


@review_router.get("/products/{product_id}/rating", response_model=CommandResult)
async def product_rating(product_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.product_rating(product_id))


@review_router.post(
    "/{review_id}/moderate",
    response_model=CommandResult,
    dependencies=[Depends(require_role("admin", "staff"))],
)
async def moderate_review(review_id: UUIDStr, body: ModerateReviewRequest) -> CommandResult:
    status = _process(ModerateReview(review_id=review_id, **body.model_dump()))
    return CommandResult.ok({"review_id": review_id, "status": status})


# ---------------------------------------------------------------------------
# Newsletter Router
# ---------------------------------------------------------------------------
newsletter_router = APIRouter(prefix="/newsletter", tags=["newsletter"])


@newsletter_router.post("/subscribe", status_code=201, response_model=CommandResult)
async def subscribe(body: NewsletterRequest) -> CommandResult:
    subscription_id = _process(SubscribeToNewsletter(**body.model_dump()))
    return CommandResult.ok({"subscription_id": subscription_id, "status": "active"})


@newsletter_router.post("/unsubscribe", response_model=CommandResult)
async def unsubscribe(body: NewsletterRequest) -> CommandResult:
    status = _process(UnsubscribeFromNewsletter(email=body.email))
    return CommandResult.ok({"email": body.email.strip().lower(), "status": status})


@newsletter_router.get("/subscriptions", response_model=CommandResult)
async def get_subscription(email: str) -> CommandResult:
    return CommandResult.ok(queries.get_subscription(email))


# ---------------------------------------------------------------------------
# Reminder Router
# ---------------------------------------------------------------------------
reminder_router = APIRouter(prefix="/reminders", tags=["reminders"])


@reminder_router.post("", status_code=201, response_model=CommandResult)
async def create_reminder(body: CreateReminderRequest) -> CommandResult:
    reminder_id = _process(CreateReminder(**body.model_dump()))
    return CommandResult.ok({"reminder_id": reminder_id})


@reminder_router.get("", response_model=CommandResult)
async def list_reminders(variant_id: UUIDStr | None = None, status: str | None = None) -> CommandResult:
    return CommandResult.ok(queries.list_reminders(variant_id, status))


@reminder_router.post("/{reminder_id}/sent", response_model=CommandResult)
async def mark_reminder_sent(reminder_id: UUIDStr) -> CommandResult:
    status = _process(MarkReminderSent(reminder_id=reminder_id))
    return CommandResult.ok({"reminder_id": reminder_id, "status": status})


@reminder_router.post("/{reminder_id}/unsubscribe", response_model=CommandResult)
async def unsubscribe_reminder(reminder_id: UUIDStr) -> CommandResult:
    status = _process(UnsubscribeReminder(reminder_id=reminder_id))
    return CommandResult.ok({"reminder_id": reminder_id, "status": status})


# ---------------------------------------------------------------------------
# Appointment Router
# ---------------------------------------------------------------------------
appointment_router = APIRouter(prefix="/appointments", tags=["appointments"])


@appointment_router.post("", status_code=201, response_model=CommandResult)
async def create_appointment(body: CreateAppointmentRequest) -> CommandResult:
    appointment_id = _process(CreateAppointment(**body.model_dump()))
    return CommandResult.ok({"appointment_id": appointment_id})


@appointment_router.get("", response_model=CommandResult)
async def list_appointments(user_id: UUIDStr | None = None, status: str | None = None) -> CommandResult:
    return CommandResult.ok(queries.list_appointments(user_id, status))


@appointment_router.put("/{appointment_id}/reschedule", response_model=CommandResult)
async def reschedule_appointment(appointment_id: UUIDStr, body: RescheduleAppointmentRequest) -> CommandResult:
    _process(RescheduleAppointment(appointment_id=appointment_id, **body.model_dump()))
    return CommandResult.ok({"appointment_id": appointment_id, "start_at": body.start_at, "end_at": body.end_at})


@appointment_router.post("/{appointment_id}/cancel", response_model=CommandResult)
async def cancel_appointment(appointment_id: UUIDStr, body: CancelAppointmentRequest | None = None) -> CommandResult:
    reason = body.reason if body else None
    status = _process(CancelAppointment(appointment_id=appointment_id, reason=reason))
    return CommandResult.ok({"appointment_id": appointment_id, "status": status})


@appointment_router.post(
    "/{appointment_id}/complete",
    response_model=CommandResult,
    dependencies=[Depends(require_role("admin", "staff"))],
)
async def complete_appointment(appointment_id: UUIDStr) -> CommandResult:
    status = _process(CompleteAppointment(appointment_id=appointment_id))
    return CommandResult.ok({"appointment_id": appointment_id, "status": status})


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
    dependencies=[Depends(require_role("admin", "staff"))],
)


@notification_router.post("", status_code=201, response_model=CommandResult)
async def schedule_notification(body: ScheduleNotificationRequest) -> CommandResult:
    data = body.model_dump()
    payload = data.pop("payload")
    data["payload_json"] = json.dumps(payload) if payload is not None else None
    notification_id = _process(ScheduleNotification(**data))
    return CommandResult.ok({"notification_id": notification_id})


@notification_router.get("/due", response_model=CommandResult)
async def due_notifications() -> CommandResult:
    return CommandResult.ok(queries.due_notifications())


@notification_router.get("/{notification_id}", response_model=CommandResult)
async def get_notification(notification_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_notification(notification_id))


@notification_router.post("/{notification_id}/sent", response_model=CommandResult)
async def mark_notification_sent(notification_id: UUIDStr) -> CommandResult:
    status = _process(MarkNotificationSent(notification_id=notification_id))
    return CommandResult.ok({"notification_id": notification_id, "status": status})


@notification_router.post("/{notification_id}/failed", response_model=CommandResult)
async def mark_notification_failed(notification_id: UUIDStr, body: NotificationFailedRequest) -> CommandResult:
    status = _process(MarkNotificationFailed(notification_id=notification_id, error=body.error))
    return CommandResult.ok({"notification_id": notification_id, "status": status})


@notification_router.post("/{notification_id}/cancel", response_model=CommandResult)
async def cancel_notification(notification_id: UUIDStr) -> CommandResult:
    status = _process(CancelNotification(notification_id=notification_id))
    return CommandResult.ok({"notification_id": notification_id, "status": status})


@notification_router.post("/{notification_id}/retry", response_model=CommandResult)
async def retry_notification(notification_id: UUIDStr, body: RetryNotificationRequest) -> CommandResult:
    status = _process(RetryNotification(notification_id=notification_id, scheduled_at=body.scheduled_at))
    return CommandResult.ok({"notification_id": notification_id, "status": status})
