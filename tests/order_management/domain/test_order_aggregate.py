"""Domain tests for the Order aggregate."""

from uuid import uuid4

import pytest
from order_management.order.events import OrderPlaced, OrderStatusChanged
from order_management.order.order import Order, OrderStatus, OrderTotals, ShipmentStatus
from protean.exceptions import ValidationError


def _items(quantity=2, unit_price=40.0, **extra):
    return [
        {
            "variant_id": str(uuid4()),
            "product": {"title": "Silk Scarf", "sku": "SCARF-RED", "color": "Red"},
            "quantity": quantity,
            "unit_price": unit_price,
            **extra,
        }
    ]


def _order(**overrides):
    params = {"items_data": _items(), "user_id": str(uuid4()), "tax": 8.0, "shipping": 5.0}
    params.update(overrides)
    return Order.create(**params)


class TestOrderCreation:
    def test_order_number_format(self):
        order = _order()
        assert order.order_no.startswith("ORD-")
        assert len(order.order_no) == 12

    def test_totals(self):
        order = _order(discount=3.0)
        assert order.totals.subtotal == 80.0
        assert order.totals.grand_total == 90.0

    def test_grand_total_never_negative(self):
        totals = OrderTotals.calculate(10.0, discount=25.0)
        assert totals.grand_total == 0.0

    def test_initial_history_and_event(self):
        order = _order()
        assert order.status == OrderStatus.CREATED.value
        assert len(order.history) == 1
        assert order.history[0].to_status == "created"
        assert any(isinstance(e, OrderPlaced) for e in order._events)

    def test_product_snapshot(self):
        order = _order()
        assert order.items[0].product_snapshot.title == "Silk Scarf"

    def test_requires_owner(self):
        with pytest.raises(ValidationError):
            _order(user_id=None)

    def test_requires_items(self):
        with pytest.raises(ValidationError):
            _order(items_data=[])

    def test_gift_item_requires_message(self):
        with pytest.raises(ValidationError):
            _order(items_data=_items(is_gift=True))

    def test_invalid_source(self):
        with pytest.raises(ValidationError) as exc:
            _order(source="fax")
        assert "source" in exc.value.messages


class TestOrderStatus:
    def test_valid_transition_appends_history(self):
        order = _order()
        order.change_status("paid", note="Captured", actor="payments")
        assert order.status == OrderStatus.PAID.value
        entry = order.history[-1]
        assert (entry.from_status, entry.to_status, entry.actor) == ("created", "paid", "payments")
        assert any(isinstance(e, OrderStatusChanged) for e in order._events)

    def test_invalid_transition(self):
        order = _order()
        with pytest.raises(ValidationError) as exc:
            order.change_status("delivered")
        assert "Cannot transition from created to delivered" in str(exc.value)

    def test_same_status_is_noop(self):
        order = _order()
        assert order.change_status("CREATED") is False
        assert len(order.history) == 1

    def test_correction_back_edge(self):
        order = _order()
        order.change_status("confirmed")
        order.change_status("pending")
        assert order.status == "pending"

    def test_refunded_is_terminal(self):
        order = _order()
        order.change_status("paid")
        order.change_status("refunded")
        with pytest.raises(ValidationError):
            order.change_status("paid")

    def test_cancelled_order_can_be_reinstated(self):
        order = _order()
        order.cancel("Customer changed mind")
        assert order.history[-1].note == "Customer changed mind"
        order.change_status("pending")
        assert order.status == "pending"

    def test_cancel_requires_reason(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.cancel("  ")

    def test_add_note_keeps_status(self):
        order = _order()
        order.add_note("Called customer")
        assert order.status == "created"
        assert order.history[-1].note == "Called customer"


class TestOrderModification:
    def test_update_item_recalculates(self):
        order = _order()
        order.update_item(order.items[0].id, 3)
        assert order.totals.subtotal == 120.0
        assert order.totals.grand_total == 133.0

    def test_items_locked_after_confirmation(self):
        order = _order()
        order.change_status("confirmed")
        with pytest.raises(ValidationError):
            order.update_item(order.items[0].id, 3)

    def test_update_totals(self):
        order = _order()
        order.update_totals(shipping=0.0, discount=10.0)
        assert order.totals.grand_total == 78.0


class TestShipments:
    def test_shipping_moves_order_to_shipped(self):
        order = _order()
        order.change_status("paid")
        shipment = order.create_shipment(carrier="DHL")
        order.mark_shipment_shipped(shipment.id, tracking_no="TRK1")
        assert order.shipments[0].status == ShipmentStatus.SHIPPED.value
        assert order.status == OrderStatus.SHIPPED.value

    def test_delivery_waits_for_all_shipments(self):
        order = _order()
        order.change_status("paid")
        first = order.create_shipment()
        second = order.create_shipment()
        order.mark_shipment_shipped(first.id)
        order.mark_shipment_shipped(second.id)

        order.mark_shipment_delivered(first.id)
        assert order.status == OrderStatus.SHIPPED.value
        order.mark_shipment_delivered(second.id)
        assert order.status == OrderStatus.DELIVERED.value

    def test_pending_shipment_cannot_be_delivered(self):
        order = _order()
        shipment = order.create_shipment()
        with pytest.raises(ValidationError):
            order.mark_shipment_delivered(shipment.id)

    def test_shipping_unpaid_order_keeps_status(self):
        order = _order()
        shipment = order.create_shipment()
        order.mark_shipment_shipped(shipment.id)
        assert order.status == OrderStatus.CREATED.value
