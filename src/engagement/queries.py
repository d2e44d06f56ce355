"""Read-side queries for the engagement context."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from engagement.appointment.appointment import Appointment, AppointmentStatus
from engagement.newsletter.subscription import NewsletterSubscription, SubscriptionStatus, find_subscription
from engagement.notification.notification import Notification, NotificationStatus
from engagement.projections.product_rating_summary import ProductRatingSummary
from engagement.reminder.reminder import Reminder, ReminderStatus
from engagement.review.review import ProductReview, ReviewStatus
from engagement.wishlist.management import wishlists_of
from engagement.wishlist.wishlist import Wishlist
from shared.clock import as_aware
from shared.paging import paginate


def _query(aggregate_cls, **filters):
    dao = current_domain.repository_for(aggregate_cls)._dao
    filters = {k: v for k, v in filters.items() if v is not None}
    return dao.query.filter(**filters).all().items if filters else dao.query.all().items


def _wishlist_dict(wishlist) -> dict:
    return {
        "wishlist_id": str(wishlist.id),
        "name": wishlist.name,
        "description": wishlist.description,
        "is_default": wishlist.is_default,
        "is_public": wishlist.is_public,
        "items": [
            {
                "item_id": str(item.id),
                "variant_id": str(item.variant_id),
                "product_id": str(item.product_id) if item.product_id else None,
                "note": item.note,
                "added_at": item.added_at,
            }
            for item in sorted(wishlist.items, key=lambda i: as_aware(i.added_at))
        ],
    }


def get_wishlist(wishlist_id: str) -> dict:
    return _wishlist_dict(current_domain.repository_for(Wishlist).get(wishlist_id))


def list_wishlists(user_id: str | None = None, guest_token: str | None = None) -> list[dict]:
    wishlists = wishlists_of(user_id, guest_token)
    # Default list first, then by creation
    ordered = sorted(wishlists, key=lambda w: (not w.is_default, as_aware(w.created_at)))
    return [_wishlist_dict(w) for w in ordered]


def list_reviews(
    product_id: str | None = None,
    status: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    reviews = _query(
        ProductReview,
        product_id=product_id,
        status=ReviewStatus.from_string(status).value if status else None,
    )
    result = paginate(sorted(reviews, key=lambda r: as_aware(r.created_at), reverse=True), page, page_size)
    result["items"] = [
        {
            "review_id": str(r.id),
            "product_id": str(r.product_id),
            "user_id": str(r.user_id),
            "rating": r.rating,
            "title": r.title,
            "body": r.body,
            "status": r.status,
            "created_at": r.created_at,
        }
        for r in result["items"]
    ]
    return result


def product_rating(product_id: str) -> dict:
    try:
        summary = current_domain.repository_for(ProductRatingSummary).get(product_id)
    except ObjectNotFoundError:
        return {"product_id": product_id, "review_count": 0, "average_rating": 0.0}
    return {
        "product_id": str(summary.product_id),
        "review_count": summary.review_count,
        "average_rating": summary.average_rating,
    }


def get_subscription(email: str) -> dict:
    subscription = find_subscription(email)
    if subscription is None:
        raise ObjectNotFoundError(f"No subscription for {email}")
    return subscription.to_dict()


def subscriber_count() -> int:
    return len(_query(NewsletterSubscription, status=SubscriptionStatus.ACTIVE.value))


def list_reminders(variant_id: str | None = None, status: str | None = None) -> list[dict]:
    reminders = _query(
        Reminder,
        variant_id=variant_id,
        status=ReminderStatus.from_string(status).value if status else None,
    )
    return [r.to_dict() for r in sorted(reminders, key=lambda r: as_aware(r.opt_in_at))]


def list_appointments(user_id: str | None = None, status: str | None = None) -> list[dict]:
    appointments = _query(
        Appointment,
        user_id=user_id,
        status=AppointmentStatus.from_string(status).value if status else None,
    )
    return [a.to_dict() for a in sorted(appointments, key=lambda a: as_aware(a.start_at))]


def get_notification(notification_id: str) -> dict:
    notification = current_domain.repository_for(Notification).get(notification_id)
    data = notification.to_dict()
    data["payload"] = notification.payload_data()
    return data


def due_notifications(as_of=None) -> list[dict]:
    scheduled = _query(Notification, status=NotificationStatus.SCHEDULED.value)
    due = [n for n in scheduled if n.is_due(as_of)]
    return [
        {
            "notification_id": str(n.id),
            "notification_type": n.notification_type,
            "channel": n.channel,
            "recipient": n.recipient,
            "scheduled_at": n.scheduled_at,
        }
        for n in sorted(due, key=lambda n: as_aware(n.scheduled_at))
    ]
