"""Application tests for engagement commands, projections and queries."""

import json
from datetime import timedelta
from uuid import uuid4

import pytest
from engagement import queries
from engagement.appointment.appointment import CancelAppointment, CreateAppointment, RescheduleAppointment
from engagement.newsletter.subscription import SubscribeToNewsletter, UnsubscribeFromNewsletter
from engagement.notification.notification import (
    MarkNotificationFailed,
    RetryNotification,
    ScheduleNotification,
)
from engagement.projections.product_rating_summary import ProductRatingSummary
from engagement.reminder.reminder import CreateReminder, MarkReminderSent
from engagement.review.moderation import CreateProductReview, ModerateReview
from engagement.wishlist.management import (
    AddToWishlist,
    CreateWishlist,
    DeleteWishlist,
    TransferGuestWishlists,
    UpdateWishlist,
)
from engagement.wishlist.wishlist import Wishlist
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.clock import utcnow


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestWishlistCommands:
    def test_first_wishlist_is_default(self):
        user_id = str(uuid4())
        first = _process(CreateWishlist(user_id=user_id))
        second = _process(CreateWishlist(user_id=user_id, name="Summer"))
        repo = current_domain.repository_for(Wishlist)
        assert repo.get(first).is_default is True
        assert repo.get(second).is_default is False

    def test_only_one_default_per_owner(self):
        user_id = str(uuid4())
        first = _process(CreateWishlist(user_id=user_id))
        second = _process(CreateWishlist(user_id=user_id, name="Summer"))
        _process(UpdateWishlist(wishlist_id=second, is_default=True))
        lists = queries.list_wishlists(user_id=user_id)
        assert [w["wishlist_id"] for w in lists if w["is_default"]] == [second]
        assert lists[0]["wishlist_id"] == second
        assert first in {w["wishlist_id"] for w in lists}

    def test_add_item_and_delete(self):
        wishlist_id = _process(CreateWishlist(guest_token="guest-abc"))
        _process(AddToWishlist(wishlist_id=wishlist_id, variant_id=str(uuid4()), note="In blue"))
        assert len(queries.get_wishlist(wishlist_id)["items"]) == 1
        _process(DeleteWishlist(wishlist_id=wishlist_id))
        with pytest.raises(ObjectNotFoundError):
            queries.get_wishlist(wishlist_id)

    def test_transfer_guest_wishlists(self):
        user_id = str(uuid4())
        _process(CreateWishlist(user_id=user_id))
        _process(CreateWishlist(guest_token="guest-xyz"))
        moved = _process(TransferGuestWishlists(guest_token="guest-xyz", user_id=user_id))
        assert moved == 1
        lists = queries.list_wishlists(user_id=user_id)
        assert len(lists) == 2
        assert len([w for w in lists if w["is_default"]]) == 1


class TestReviewCommands:
    def _review(self, product_id, rating):
        return _process(CreateProductReview(product_id=product_id, user_id=str(uuid4()), rating=rating))

    def test_one_review_per_user_and_product(self):
        product_id, user_id = str(uuid4()), str(uuid4())
        _process(CreateProductReview(product_id=product_id, user_id=user_id, rating=4))
        with pytest.raises(ValidationError):
            _process(CreateProductReview(product_id=product_id, user_id=user_id, rating=5))

    def test_rating_summary_counts_approved_reviews_only(self):
        product_id = str(uuid4())
        first = self._review(product_id, 5)
        second = self._review(product_id, 2)
        self._review(product_id, 1)

        _process(ModerateReview(review_id=first, action="approve"))
        _process(ModerateReview(review_id=second, action="approve"))
        summary = current_domain.repository_for(ProductRatingSummary).get(product_id)
        assert summary.review_count == 2
        assert summary.average_rating == 3.5

        _process(ModerateReview(review_id=second, action="flag"))
        rating = queries.product_rating(product_id)
        assert rating["review_count"] == 1
        assert rating["average_rating"] == 5.0

    def test_unreviewed_product_rating(self):
        assert queries.product_rating(str(uuid4()))["review_count"] == 0

    def test_list_reviews_by_status(self):
        product_id = str(uuid4())
        review_id = self._review(product_id, 4)
        self._review(product_id, 3)
        _process(ModerateReview(review_id=review_id, action="approve"))
        approved = queries.list_reviews(product_id=product_id, status="approved")
        assert approved["total"] == 1
        assert approved["items"][0]["review_id"] == review_id


class TestNewsletterCommands:
    def test_subscribe_is_idempotent_and_reactivates(self):
        first = _process(SubscribeToNewsletter(email="Ada@Example.com"))
        assert _process(UnsubscribeFromNewsletter(email="ada@example.com")) == "unsubscribed"
        second = _process(SubscribeToNewsletter(email="ada@example.com", source="checkout"))
        assert first == second
        assert queries.get_subscription("ada@example.com")["status"] == "active"
        assert queries.subscriber_count() == 1

    def test_unsubscribe_unknown_email(self):
        with pytest.raises(ObjectNotFoundError):
            _process(UnsubscribeFromNewsletter(email="nobody@example.com"))


class TestReminderCommands:
    def test_duplicate_active_reminder_is_reused(self):
        variant_id = str(uuid4())
        first = _process(CreateReminder(reminder_type="restock", variant_id=variant_id, contact="ada@example.com"))
        second = _process(CreateReminder(reminder_type="restock", variant_id=variant_id, contact="ADA@example.com"))
        assert first == second

    def test_mark_sent(self):
        reminder_id = _process(
            CreateReminder(reminder_type="price_drop", variant_id=str(uuid4()), contact="ada@example.com")
        )
        assert _process(MarkReminderSent(reminder_id=reminder_id)) == "sent"
        assert queries.list_reminders(status="active") == []


class TestAppointmentCommands:
    def test_book_reschedule_cancel(self):
        user_id = str(uuid4())
        start = utcnow() + timedelta(days=2)
        appointment_id = _process(
            CreateAppointment(
                user_id=user_id, appointment_type="stylist", start_at=start, end_at=start + timedelta(hours=1)
            )
        )
        later = start + timedelta(days=1)
        _process(RescheduleAppointment(appointment_id=appointment_id, start_at=later, end_at=later + timedelta(hours=1)))
        assert _process(CancelAppointment(appointment_id=appointment_id, reason="Sick")) == "cancelled"
        listed = queries.list_appointments(user_id=user_id)
        assert listed[0]["status"] == "cancelled"
        assert listed[0]["cancellation_reason"] == "Sick"

    def test_reschedule_into_the_past(self):
        start = utcnow() + timedelta(days=2)
        appointment_id = _process(
            CreateAppointment(
                user_id=str(uuid4()), appointment_type="in_store", start_at=start, end_at=start + timedelta(hours=1)
            )
        )
        past = utcnow() - timedelta(days=1)
        with pytest.raises(ValidationError):
            _process(
                RescheduleAppointment(appointment_id=appointment_id, start_at=past, end_at=past + timedelta(hours=1))
            )


class TestNotificationCommands:
    def test_failed_notification_is_retried(self):
        notification_id = _process(
            ScheduleNotification(
                notification_type="order_shipped",
                channel="email",
                recipient="ada@example.com",
                payload_json=json.dumps({"order_no": "MD-42"}),
            )
        )
        assert _process(MarkNotificationFailed(notification_id=notification_id, error="Bounce")) == "failed"
        assert _process(RetryNotification(notification_id=notification_id)) == "scheduled"
        detail = queries.get_notification(notification_id)
        assert detail["payload"] == {"order_no": "MD-42"}
        assert detail["attempts"] == 1
        assert notification_id in {n["notification_id"] for n in queries.due_notifications()}

    def test_payload_must_be_a_json_object(self):
        with pytest.raises(ValidationError):
            _process(
                ScheduleNotification(
                    notification_type="promo", channel="sms", recipient="+94771234567", payload_json="[1, 2]"
                )
            )
