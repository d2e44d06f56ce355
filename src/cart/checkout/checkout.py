"""Checkout session aggregate.

A checkout freezes the cart total for a short window. Completing it converts
the cart; an unattended checkout expires.

State Machine:
    PENDING → COMPLETED | EXPIRED | CANCELLED
"""

from datetime import timedelta

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from cart.domain import cart
from shared.clock import is_past, utcnow
from shared.money import round_money
from shared.status import StatusEnum, assert_transition


class CheckoutStatus(StatusEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    CheckoutStatus.PENDING: {CheckoutStatus.COMPLETED, CheckoutStatus.EXPIRED, CheckoutStatus.CANCELLED},
    CheckoutStatus.COMPLETED: set(),
    CheckoutStatus.EXPIRED: set(),
    CheckoutStatus.CANCELLED: set(),
}


@cart.aggregate
class Checkout:
    cart_id = Identifier(required=True)
    user_id = Identifier()
    guest_token = String(max_length=255)
    total_amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="USD")
    status = String(choices=CheckoutStatus, default=CheckoutStatus.PENDING.value)
    expires_at = DateTime(required=True)
    completed_at = DateTime()
    created_at = DateTime()

    @invariant.post
    def owned_by_exactly_one_of_user_or_guest(self):
        if bool(self.user_id) == bool(self.guest_token):
            raise ValidationError({"checkout": ["A checkout belongs to either a user or a guest token"]})

    @classmethod
    def start(cls, cart_id, total_amount, currency, user_id=None, guest_token=None, ttl_minutes=15):
        now = utcnow()
        return cls(
            cart_id=cart_id,
            user_id=user_id,
            guest_token=guest_token,
            total_amount=round_money(total_amount),
            currency=currency,
            expires_at=now + timedelta(minutes=ttl_minutes),
            created_at=now,
        )

    def is_expired(self, as_of=None) -> bool:
        return is_past(self.expires_at, as_of)

    def _change_status(self, target: CheckoutStatus):
        current = CheckoutStatus.from_string(self.status)
        assert_transition(_VALID_TRANSITIONS, current, target)
        self.status = target.value

    def complete(self):
        if self.status == CheckoutStatus.PENDING.value and self.is_expired():
            raise ValidationError({"checkout": ["Checkout session has expired"]})
        self._change_status(CheckoutStatus.COMPLETED)
        self.completed_at = utcnow()

    def cancel(self):
        self._change_status(CheckoutStatus.CANCELLED)

    def expire(self):
        self._change_status(CheckoutStatus.EXPIRED)
