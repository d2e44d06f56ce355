"""Short-lived stock hold placed by a cart on a product variant."""

from datetime import timedelta

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from cart.domain import cart
from shared.clock import as_aware, is_past, utcnow
from shared.status import StatusEnum, assert_transition


class ReservationStatus(StatusEnum):
    ACTIVE = "active"
    RELEASED = "released"
    EXPIRED = "expired"
    CONSUMED = "consumed"


_VALID_TRANSITIONS = {
    ReservationStatus.ACTIVE: {ReservationStatus.RELEASED, ReservationStatus.EXPIRED, ReservationStatus.CONSUMED},
    ReservationStatus.RELEASED: set(),
    ReservationStatus.EXPIRED: set(),
    ReservationStatus.CONSUMED: set(),
}


@cart.aggregate
class Reservation:
    cart_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    status = String(choices=ReservationStatus, default=ReservationStatus.ACTIVE.value)
    expires_at = DateTime(required=True)
    max_expires_at = DateTime(required=True)
    created_at = DateTime()

    @classmethod
    def create(cls, cart_id, variant_id, quantity, duration_minutes=30, max_extension_minutes=120):
        if duration_minutes <= 0:
            raise ValidationError({"duration_minutes": ["Reservation duration must be positive"]})
        now = utcnow()
        expires_at = now + timedelta(minutes=duration_minutes)
        return cls(
            cart_id=cart_id,
            variant_id=variant_id,
            quantity=quantity,
            expires_at=expires_at,
            max_expires_at=expires_at + timedelta(minutes=max_extension_minutes),
            created_at=now,
        )

    def is_expired(self, as_of=None) -> bool:
        return is_past(self.expires_at, as_of)

    def is_holding(self, as_of=None) -> bool:
        return self.status == ReservationStatus.ACTIVE.value and not self.is_expired(as_of)

    def seconds_until_expiry(self) -> int:
        remaining = (as_aware(self.expires_at) - utcnow()).total_seconds()
        return max(0, int(remaining))

    def _assert_active(self, action):
        if self.status != ReservationStatus.ACTIVE.value:
            raise ValidationError({"status": [f"Cannot {action} a {self.status} reservation"]})

    def extend(self, minutes):
        """Push the expiry out by `minutes`, never past the maximum hold."""
        self._assert_active("extend")
        if minutes <= 0:
            raise ValidationError({"minutes": ["Extension duration must be positive"]})

        start = utcnow() if self.is_expired() else as_aware(self.expires_at)
        proposed = start + timedelta(minutes=minutes)
        if proposed > as_aware(self.max_expires_at):
            raise ValidationError({"minutes": ["Reservation cannot be extended beyond its maximum hold time"]})
        self.expires_at = proposed

    def renew(self, duration_minutes=30):
        self._assert_active("renew")
        if duration_minutes <= 0:
            raise ValidationError({"duration_minutes": ["Renewal duration must be positive"]})
        proposed = utcnow() + timedelta(minutes=duration_minutes)
        self.expires_at = min(proposed, as_aware(self.max_expires_at))

    def adjust_quantity(self, quantity):
        self._assert_active("adjust")
        if quantity < 1:
            raise ValidationError({"quantity": ["Use release to drop a reservation"]})
        self.quantity = quantity

    def _change_status(self, target: ReservationStatus):
        current = ReservationStatus.from_string(self.status)
        assert_transition(_VALID_TRANSITIONS, current, target)
        self.status = target.value

    def release(self):
        self._change_status(ReservationStatus.RELEASED)

    def consume(self):
        if self.is_expired():
            raise ValidationError({"reservation": ["Reservation has expired"]})
        self._change_status(ReservationStatus.CONSUMED)

    def expire(self):
        self._change_status(ReservationStatus.EXPIRED)
