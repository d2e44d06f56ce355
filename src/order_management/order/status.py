"""Order status changes, cancellation and system notes."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from order_management.domain import logger, order_management
from order_management.order.order import Order


@order_management.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=30)
    note = String(max_length=1000)
    actor = String(max_length=100)


@order_management.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=1000)
    actor = String(max_length=100)


@order_management.command(part_of="Order")
class AddOrderNote:
    order_id = Identifier(required=True)
    note = String(required=True, max_length=1000)
    actor = String(max_length=100)


@order_management.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        if order.change_status(command.status, note=command.note, actor=command.actor):
            repo.add(order)
            logger.info(
                "Order status changed",
                order_id=str(order.id),
                from_status=previous,
                to_status=order.status,
            )
        return order.status

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(command.reason, actor=command.actor)
        repo.add(order)
        logger.info("Order cancelled", order_id=str(order.id), reason=command.reason)

    @handle(AddOrderNote)
    def add_note(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.add_note(command.note, actor=command.actor)
        repo.add(order)
