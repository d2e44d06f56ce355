"""GiftCard aggregate with its balance ledger.

State Machine:
    ACTIVE → REDEEMED | EXPIRED | CANCELLED
    REDEEMED → ACTIVE (refund) | CANCELLED
"""

import secrets

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, String, Text

from payment_loyalty.domain import payment_loyalty
from payment_loyalty.money import Money
from shared.clock import is_past, utcnow
from shared.status import StatusEnum, assert_transition


class GiftCardStatus(StatusEnum):
    ACTIVE = "active"
    REDEEMED = "redeemed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class GiftCardTransactionType(StatusEnum):
    ISSUE = "issue"
    REDEEM = "redeem"
    REFUND = "refund"


_VALID_TRANSITIONS = {
    GiftCardStatus.ACTIVE: {GiftCardStatus.REDEEMED, GiftCardStatus.EXPIRED, GiftCardStatus.CANCELLED},
    GiftCardStatus.REDEEMED: {GiftCardStatus.ACTIVE, GiftCardStatus.CANCELLED},
    GiftCardStatus.EXPIRED: set(),
    GiftCardStatus.CANCELLED: set(),
}


def generate_code() -> str:
    raw = secrets.token_hex(6).upper()
    return f"GC-{raw[:4]}-{raw[4:8]}-{raw[8:]}"


@payment_loyalty.entity(part_of="GiftCard")
class GiftCardTransaction:
    txn_type = String(required=True, choices=GiftCardTransactionType)
    amount = Float(required=True, min_value=0.0)
    order_id = Identifier()
    created_at = DateTime(required=True)


@payment_loyalty.aggregate
class GiftCard:
    code = String(required=True, max_length=50)
    initial_balance = Float(required=True, min_value=0.0)
    balance = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="USD")
    expires_at = DateTime()
    recipient_email = String(max_length=254)
    recipient_name = String(max_length=200)
    message = Text()
    status = String(choices=GiftCardStatus, default=GiftCardStatus.ACTIVE.value)
    transactions = HasMany(GiftCardTransaction)
    created_at = DateTime()

    @classmethod
    def issue(cls, amount, currency="USD", code=None, expires_at=None, recipient_email=None, recipient_name=None, message=None):
        value = Money.create(amount, currency)
        if value.is_zero():
            raise ValidationError({"initial_balance": ["Gift card balance must be positive"]})
        if expires_at is not None and is_past(expires_at):
            raise ValidationError({"expires_at": ["Expiry date must be in the future"]})

        now = utcnow()
        card = cls(
            code=(code or generate_code()).strip().upper(),
            initial_balance=value.amount,
            balance=value.amount,
            currency=value.currency,
            expires_at=expires_at,
            recipient_email=recipient_email,
            recipient_name=recipient_name,
            message=message,
            created_at=now,
        )
        card.add_transactions(GiftCardTransaction(txn_type="issue", amount=value.amount, created_at=now))
        return card

    def _money(self, amount) -> Money:
        return Money.create(amount, self.currency)

    def _change_status(self, target: GiftCardStatus):
        current = GiftCardStatus.from_string(self.status)
        if current != target:
            assert_transition(_VALID_TRANSITIONS, current, target)
            self.status = target.value

    def is_expired(self, as_of=None) -> bool:
        return is_past(self.expires_at, as_of)

    def redeem(self, amount, order_id=None):
        if self.status != GiftCardStatus.ACTIVE.value:
            raise ValidationError({"status": ["Gift card is not active"]})
        if self.is_expired():
            raise ValidationError({"expires_at": ["Gift card has expired"]})

        requested = self._money(amount)
        if requested.is_zero():
            raise ValidationError({"amount": ["Redemption amount must be positive"]})
        balance = self._money(self.balance)
        if requested.is_greater_than(balance):
            raise ValidationError({"amount": [f"Insufficient gift card balance ({balance})"]})

        self.balance = balance.subtract(requested).amount
        self.add_transactions(
            GiftCardTransaction(txn_type="redeem", amount=requested.amount, order_id=order_id, created_at=utcnow())
        )
        if self.balance == 0:
            self._change_status(GiftCardStatus.REDEEMED)
        return self.balance

    def refund(self, amount, order_id=None):
        if self.status not in (GiftCardStatus.ACTIVE.value, GiftCardStatus.REDEEMED.value):
            raise ValidationError({"status": [f"Cannot refund to a {self.status} gift card"]})

        restored = self._money(self.balance).add(self._money(amount))
        if restored.is_greater_than(self._money(self.initial_balance)):
            raise ValidationError({"amount": ["Refund would exceed the original gift card value"]})

        self.balance = restored.amount
        self.add_transactions(
            GiftCardTransaction(txn_type="refund", amount=self._money(amount).amount, order_id=order_id, created_at=utcnow())
        )
        self._change_status(GiftCardStatus.ACTIVE)
        return self.balance

    def cancel(self):
        self._change_status(GiftCardStatus.CANCELLED)

    def expire(self):
        self._change_status(GiftCardStatus.EXPIRED)
