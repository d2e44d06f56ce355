"""Backorder and preorder records attached to individual order items."""

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier

from order_management.domain import order_management
from shared.clock import as_aware, is_past, utcnow


@order_management.aggregate
class Backorder:
    """An order item waiting on restock, with the ETA promised to the customer."""

    order_item_id = Identifier(required=True)
    promised_eta = DateTime()
    notified_at = DateTime()
    created_at = DateTime()

    @classmethod
    def create(cls, order_item_id, promised_eta=None):
        if promised_eta is not None and is_past(promised_eta):
            raise ValidationError({"promised_eta": ["Promised ETA cannot be in the past"]})
        return cls(order_item_id=order_item_id, promised_eta=promised_eta, created_at=utcnow())

    def update_eta(self, promised_eta):
        if is_past(promised_eta):
            raise ValidationError({"promised_eta": ["Promised ETA cannot be in the past"]})
        self.promised_eta = promised_eta

    def mark_notified(self):
        self.notified_at = utcnow()

    def is_overdue(self, as_of=None) -> bool:
        return self.notified_at is None and is_past(self.promised_eta, as_of)


@order_management.aggregate
class Preorder:
    """An order item for a product that has not been released yet."""

    order_item_id = Identifier(required=True)
    release_date = DateTime()
    notified_at = DateTime()
    created_at = DateTime()

    @classmethod
    def create(cls, order_item_id, release_date=None):
        return cls(order_item_id=order_item_id, release_date=release_date, created_at=utcnow())

    def mark_notified(self):
        if self.notified_at is not None:
            raise ValidationError({"preorder": ["Customer was already notified"]})
        self.notified_at = utcnow()

    def is_released(self, as_of=None) -> bool:
        return self.release_date is not None and as_aware(self.release_date) <= as_aware(as_of or utcnow())
