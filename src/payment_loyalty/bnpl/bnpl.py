"""Buy-now-pay-later transaction attached to a payment intent.

State Machine:
    PENDING → APPROVED | REJECTED | CANCELLED
    APPROVED → ACTIVE | CANCELLED
    ACTIVE → COMPLETED | CANCELLED
"""

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, ValueObject

from payment_loyalty.domain import payment_loyalty
from payment_loyalty.money import Money
from shared.clock import utcnow
from shared.status import StatusEnum, assert_transition


class BnplStatus(StatusEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    BnplStatus.PENDING: {BnplStatus.APPROVED, BnplStatus.REJECTED, BnplStatus.CANCELLED},
    BnplStatus.APPROVED: {BnplStatus.ACTIVE, BnplStatus.CANCELLED},
    BnplStatus.ACTIVE: {BnplStatus.COMPLETED, BnplStatus.CANCELLED},
    BnplStatus.REJECTED: set(),
    BnplStatus.COMPLETED: set(),
    BnplStatus.CANCELLED: set(),
}

ACTIONS = {
    "approve": BnplStatus.APPROVED,
    "reject": BnplStatus.REJECTED,
    "activate": BnplStatus.ACTIVE,
    "complete": BnplStatus.COMPLETED,
    "cancel": BnplStatus.CANCELLED,
}


@payment_loyalty.value_object(part_of="BnplTransaction")
class BnplPlan:
    installments = Integer(required=True, min_value=2, max_value=12)
    installment_amount = Float(required=True, min_value=0.0)
    interval_days = Integer(required=True, min_value=1)

    @classmethod
    def split(cls, total: Money, installments: int, interval_days: int) -> "BnplPlan":
        return cls(
            installments=installments,
            installment_amount=Money.create(total.amount / installments, total.currency).amount,
            interval_days=interval_days,
        )


@payment_loyalty.aggregate
class BnplTransaction:
    intent_id = Identifier(required=True)
    provider = String(required=True, max_length=50)  # koko, mintpay, ...
    total_amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="USD")
    plan = ValueObject(BnplPlan)
    status = String(choices=BnplStatus, default=BnplStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, intent_id, provider, total: Money, installments: int, interval_days: int):
        now = utcnow()
        return cls(
            intent_id=intent_id,
            provider=provider.strip().lower(),
            total_amount=total.amount,
            currency=total.currency,
            plan=BnplPlan.split(total, installments, interval_days),
            created_at=now,
            updated_at=now,
        )

    def apply(self, action: str):
        target = ACTIONS.get((action or "").strip().lower())
        if target is None:
            raise ValidationError({"action": [f"Unknown action: {action}. Valid: {', '.join(ACTIONS)}"]})

        current = BnplStatus.from_string(self.status)
        if current == target:
            return
        assert_transition(_VALID_TRANSITIONS, current, target)
        self.status = target.value
        self.updated_at = utcnow()
