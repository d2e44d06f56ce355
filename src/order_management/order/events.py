"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from order_management.domain import order_management


@order_management.event(part_of="Order")
class OrderPlaced:
    """A new order was recorded."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_no = String(required=True)
    user_id = Identifier()
    status = String(required=True)
    item_count = Integer(required=True)
    grand_total = Float(required=True)
    currency = String(required=True)
    created_at = DateTime(required=True)


@order_management.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    note = String()
    changed_at = DateTime(required=True)


@order_management.event(part_of="Order")
class OrderTotalsChanged:
    """Items or totals changed; carries the recalculated figures."""

    __version__ = 1

    order_id = Identifier(required=True)
    item_count = Integer(required=True)
    grand_total = Float(required=True)
    updated_at = DateTime(required=True)


@order_management.event(part_of="Order")
class ShipmentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    shipment_id = Identifier(required=True)
    status = String(required=True)
    carrier = String()
    tracking_no = String()
