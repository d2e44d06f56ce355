"""PaymentIntent aggregate: an amount to collect for an order, and its transactions.

State Machine:
    REQUIRES_ACTION → AUTHORIZED | FAILED | CANCELLED
    AUTHORIZED → CAPTURED | CANCELLED | FAILED
    CAPTURED → REFUNDED | PARTIALLY_REFUNDED
    PARTIALLY_REFUNDED → REFUNDED
"""

from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, String, ValueObject

from payment_loyalty.domain import payment_loyalty
from payment_loyalty.money import Money
from payment_loyalty.payment.events import PaymentIntentStatusChanged
from shared.clock import utcnow
from shared.status import StatusEnum, assert_transition


class PaymentIntentStatus(StatusEnum):
    REQUIRES_ACTION = "requires_action"
    AUTHORIZED = "authorized"
    CAPTURED = "captured"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class PaymentProvider(StatusEnum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    RAZORPAY = "razorpay"
    PAYABLE = "payable"

    @classmethod
    def field_name(cls):
        return "provider"


class TransactionType(StatusEnum):
    AUTH = "auth"
    CAPTURE = "capture"
    REFUND = "refund"
    VOID = "void"


_VALID_TRANSITIONS = {
    PaymentIntentStatus.REQUIRES_ACTION: {
        PaymentIntentStatus.AUTHORIZED,
        PaymentIntentStatus.FAILED,
        PaymentIntentStatus.CANCELLED,
    },
    PaymentIntentStatus.AUTHORIZED: {
        PaymentIntentStatus.CAPTURED,
        PaymentIntentStatus.CANCELLED,
        PaymentIntentStatus.FAILED,
    },
    PaymentIntentStatus.CAPTURED: {PaymentIntentStatus.REFUNDED, PaymentIntentStatus.PARTIALLY_REFUNDED},
    PaymentIntentStatus.PARTIALLY_REFUNDED: {PaymentIntentStatus.REFUNDED},
    PaymentIntentStatus.FAILED: set(),
    PaymentIntentStatus.CANCELLED: set(),
    PaymentIntentStatus.REFUNDED: set(),
}


@payment_loyalty.entity(part_of="PaymentIntent")
class PaymentTransaction:
    txn_type = String(required=True, choices=TransactionType)
    amount = Float(required=True, min_value=0.0)
    status = String(required=True, max_length=20)  # succeeded, failed
    failure_reason = String(max_length=500)
    note = String(max_length=500)
    created_at = DateTime(required=True)


@payment_loyalty.aggregate
class PaymentIntent:
    order_id = Identifier()
    provider = String(required=True, choices=PaymentProvider)
    amount = ValueObject(Money, required=True)
    idempotency_key = String(required=True, max_length=255)
    client_secret = String(max_length=255)
    status = String(choices=PaymentIntentStatus, default=PaymentIntentStatus.REQUIRES_ACTION.value)
    refunded_amount = Float(default=0.0)
    transactions = HasMany(PaymentTransaction)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, amount, currency, provider, idempotency_key, order_id=None):
        if amount <= 0:
            raise ValidationError({"amount": ["Payment amount must be positive"]})
        now = utcnow()
        intent_id = str(uuid4())
        return cls(
            id=intent_id,
            order_id=order_id,
            provider=PaymentProvider.from_string(provider).value,
            amount=Money.create(amount, currency),
            idempotency_key=idempotency_key,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:16]}",
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _record(self, txn_type: TransactionType, amount, status="succeeded", failure_reason=None, note=None):
        self.add_transactions(
            PaymentTransaction(
                txn_type=txn_type.value,
                amount=amount,
                status=status,
                failure_reason=failure_reason,
                note=note,
                created_at=utcnow(),
            )
        )

    def _change_status(self, target: PaymentIntentStatus):
        current = PaymentIntentStatus.from_string(self.status)
        if current == target:
            return
        assert_transition(_VALID_TRANSITIONS, current, target)

        now = utcnow()
        self.status = target.value
        self.updated_at = now
        self.raise_(
            PaymentIntentStatusChanged(
                intent_id=str(self.id),
                order_id=str(self.order_id) if self.order_id else None,
                from_status=current.value,
                to_status=target.value,
                amount=self.amount.amount,
                currency=self.amount.currency,
                changed_at=now,
            )
        )

    def refundable_amount(self) -> float:
        return self.amount.subtract(Money.create(self.refunded_amount, self.amount.currency)).amount

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def authorize(self):
        self._change_status(PaymentIntentStatus.AUTHORIZED)
        self._record(TransactionType.AUTH, self.amount.amount)

    def capture(self):
        self._change_status(PaymentIntentStatus.CAPTURED)
        self._record(TransactionType.CAPTURE, self.amount.amount)

    def fail(self, reason):
        self._change_status(PaymentIntentStatus.FAILED)
        self._record(TransactionType.AUTH, self.amount.amount, status="failed", failure_reason=reason)

    def cancel(self):
        self._change_status(PaymentIntentStatus.CANCELLED)
        self._record(TransactionType.VOID, 0.0)

    def refund(self, amount=None, reason=None):
        """Refund `amount` (default: everything still refundable)."""
        if self.status not in (PaymentIntentStatus.CAPTURED.value, PaymentIntentStatus.PARTIALLY_REFUNDED.value):
            raise ValidationError({"status": [f"Cannot refund payment with status {self.status}"]})

        remaining = Money.create(self.refundable_amount(), self.amount.currency)
        refund = remaining if amount is None else Money.create(amount, self.amount.currency)
        if refund.is_zero():
            raise ValidationError({"amount": ["Refund amount must be positive"]})
        if refund.is_greater_than(remaining):
            raise ValidationError({"amount": [f"Refund cannot exceed the captured amount ({remaining})"]})

        self.refunded_amount = Money.create(self.refunded_amount, self.amount.currency).add(refund).amount
        fully_refunded = self.refunded_amount >= self.amount.amount
        self._change_status(
            PaymentIntentStatus.REFUNDED if fully_refunded else PaymentIntentStatus.PARTIALLY_REFUNDED
        )
        self._record(TransactionType.REFUND, refund.amount, note=reason)
        return refund.amount
