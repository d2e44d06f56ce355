"""Order placement: command and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from order_management.domain import logger, order_management
from order_management.order.order import Order


def _load(value):
    if value is None:
        return None
    return json.loads(value) if isinstance(value, str) else value


@order_management.command(part_of="Order")
class CreateOrder:
    user_id = Identifier()
    guest_token = String(max_length=255)
    email = String(max_length=254)
    items = Text(required=True)  # JSON: list of item dicts
    shipping_address = Text()  # JSON: address dict
    billing_address = Text()  # JSON: address dict
    tax = Float(default=0.0, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    currency = String(max_length=3, default="USD")
    source = String(max_length=10, default="web")


@order_management.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        order = Order.create(
            items_data=_load(command.items),
            user_id=command.user_id,
            guest_token=command.guest_token,
            email=command.email,
            shipping_address=_load(command.shipping_address),
            billing_address=_load(command.billing_address),
            tax=command.tax or 0.0,
            shipping=command.shipping or 0.0,
            discount=command.discount or 0.0,
            currency=command.currency,
            source=command.source or "web",
        )
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order created",
            order_id=str(order.id),
            order_no=order.order_no,
            grand_total=order.totals.grand_total,
        )
        return {"order_id": str(order.id), "order_no": order.order_no}
