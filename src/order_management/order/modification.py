"""Order modification: line item quantities and totals."""

from protean import handle
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from order_management.domain import order_management
from order_management.order.order import Order


@order_management.command(part_of="Order")
class UpdateOrderItem:
    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@order_management.command(part_of="Order")
class UpdateOrderTotals:
    order_id = Identifier(required=True)
    tax = Float(min_value=0.0)
    shipping = Float(min_value=0.0)
    discount = Float(min_value=0.0)


@order_management.command_handler(part_of=Order)
class ModifyOrderHandler:
    @handle(UpdateOrderItem)
    def update_item(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_item(command.item_id, command.quantity)
        repo.add(order)
        return order.totals.grand_total

    @handle(UpdateOrderTotals)
    def update_totals(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_totals(tax=command.tax, shipping=command.shipping, discount=command.discount)
        repo.add(order)
        return order.totals.grand_total
