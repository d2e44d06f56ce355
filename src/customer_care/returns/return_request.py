"""ReturnRequest (RMA) aggregate with the items being sent back.

State Machine:
    ELIGIBILITY → APPROVED | REJECTED
    APPROVED → IN_TRANSIT | REJECTED
    IN_TRANSIT → RECEIVED
    RECEIVED → REFUNDED
"""

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from customer_care.domain import customer_care
from customer_care.returns.events import ReturnStatusChanged
from shared.clock import utcnow
from shared.money import round_money
from shared.status import StatusEnum, assert_transition


class RmaStatus(StatusEnum):
    ELIGIBILITY = "eligibility"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_TRANSIT = "in_transit"
    RECEIVED = "received"
    REFUNDED = "refunded"


class RmaType(StatusEnum):
    RETURN = "return"
    EXCHANGE = "exchange"
    REPAIR = "repair"

    @classmethod
    def field_name(cls):
        return "rma_type"


class ItemCondition(StatusEnum):
    NEW = "new"
    OPENED = "opened"
    USED = "used"
    DAMAGED = "damaged"

    @classmethod
    def field_name(cls):
        return "condition"


class ItemDisposition(StatusEnum):
    REFUND = "refund"
    REPLACE = "replace"
    REPAIR = "repair"
    DISCARD = "discard"

    @classmethod
    def field_name(cls):
        return "disposition"


_VALID_TRANSITIONS = {
    RmaStatus.ELIGIBILITY: {RmaStatus.APPROVED, RmaStatus.REJECTED},
    RmaStatus.APPROVED: {RmaStatus.IN_TRANSIT, RmaStatus.REJECTED},
    RmaStatus.IN_TRANSIT: {RmaStatus.RECEIVED},
    RmaStatus.RECEIVED: {RmaStatus.REFUNDED},
    RmaStatus.REJECTED: set(),
    RmaStatus.REFUNDED: set(),
}

FINAL_STATUSES = {RmaStatus.REJECTED.value, RmaStatus.REFUNDED.value}


@customer_care.entity(part_of="ReturnRequest")
class ReturnItem:
    order_item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    condition = String(choices=ItemCondition)
    disposition = String(choices=ItemDisposition)
    fees = Float(min_value=0.0)


@customer_care.aggregate
class ReturnRequest:
    order_id = Identifier(required=True)
    rma_type = String(required=True, choices=RmaType)
    reason = Text()
    status = String(choices=RmaStatus, default=RmaStatus.ELIGIBILITY.value)
    items = HasMany(ReturnItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, order_id, rma_type, reason=None):
        if not order_id:
            raise ValidationError({"order_id": ["Order ID is required"]})
        now = utcnow()
        return cls(
            order_id=order_id,
            rma_type=RmaType.from_string(rma_type).value,
            reason=reason.strip() if reason else None,
            created_at=now,
            updated_at=now,
        )

    def is_finalized(self) -> bool:
        return self.status in FINAL_STATUSES

    def _assert_editable(self, action):
        if self.is_finalized():
            raise ValidationError({"status": [f"Cannot {action} a finalized return request"]})

    def _find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": [f"Return item {item_id} not found"]})
        return item

    def add_item(self, order_item_id, quantity, condition=None, disposition=None, fees=None):
        self._assert_editable("add items to")
        if any(str(i.order_item_id) == str(order_item_id) for i in self.items):
            raise ValidationError({"order_item_id": [f"Order item {order_item_id} is already in this return"]})
        item = ReturnItem(
            order_item_id=order_item_id,
            quantity=quantity,
            condition=ItemCondition.from_string(condition).value if condition else None,
            disposition=ItemDisposition.from_string(disposition).value if disposition else None,
            fees=round_money(fees) if fees is not None else None,
        )
        self.add_items(item)
        self.updated_at = utcnow()
        return item

    def update_item_condition(self, item_id, condition=None, disposition=None):
        self._assert_editable("update items of")
        item = self._find_item(item_id)
        if condition is not None:
            item.condition = ItemCondition.from_string(condition).value
        if disposition is not None:
            item.disposition = ItemDisposition.from_string(disposition).value
        self.updated_at = utcnow()

    def update_reason(self, reason):
        self._assert_editable("update the reason of")
        self.reason = reason.strip() if reason else None
        self.updated_at = utcnow()

    def change_status(self, status):
        target = RmaStatus.from_string(status)
        current = RmaStatus.from_string(self.status)
        if current == target:
            return
        if self.is_finalized():
            raise ValidationError({"status": ["Cannot change status of a finalized return request"]})
        assert_transition(_VALID_TRANSITIONS, current, target)
        if target == RmaStatus.APPROVED and not self.items:
            raise ValidationError({"items": ["Cannot approve a return without items"]})

        now = utcnow()
        self.status = target.value
        self.updated_at = now
        self.raise_(
            ReturnStatusChanged(
                return_id=str(self.id),
                order_id=str(self.order_id),
                from_status=current.value,
                to_status=target.value,
                changed_at=now,
            )
        )

    def approve(self):
        self.change_status(RmaStatus.APPROVED)

    def reject(self):
        self.change_status(RmaStatus.REJECTED)

    def mark_in_transit(self):
        self.change_status(RmaStatus.IN_TRANSIT)

    def mark_received(self):
        self.change_status(RmaStatus.RECEIVED)

    def mark_refunded(self):
        self.change_status(RmaStatus.REFUNDED)

    def total_quantity(self) -> int:
        return sum(i.quantity for i in self.items)
