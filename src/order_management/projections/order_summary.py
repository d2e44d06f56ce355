"""Order summary: one row per order for account and admin listings."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from order_management.domain import order_management
from order_management.order.events import OrderPlaced, OrderStatusChanged, OrderTotalsChanged
from order_management.order.order import Order


@order_management.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_no = String(required=True)
    user_id = Identifier()
    status = String(required=True)
    item_count = Integer(default=0)
    grand_total = Float(default=0.0)
    currency = String(default="USD")
    created_at = DateTime()
    updated_at = DateTime()


@order_management.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_no=event.order_no,
                user_id=event.user_id,
                status=event.status,
                item_count=event.item_count,
                grand_total=event.grand_total,
                currency=event.currency,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = event.to_status
        summary.updated_at = event.changed_at
        repo.add(summary)

    @on(OrderTotalsChanged)
    def on_totals_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.item_count = event.item_count
        summary.grand_total = event.grand_total
        summary.updated_at = event.updated_at
        repo.add(summary)
