"""Application tests for order, shipment, backorder and preorder commands."""

import json
from datetime import timedelta
from uuid import uuid4

import pytest
from order_management import queries
from order_management.backorders.backorder import Backorder
from order_management.backorders.management import (
    CreateBackorder,
    CreatePreorder,
    MarkBackorderNotified,
    MarkPreorderNotified,
)
from order_management.order.modification import UpdateOrderItem, UpdateOrderTotals
from order_management.order.order import Order
from order_management.order.placement import CreateOrder
from order_management.order.shipping import CreateShipment, MarkShipmentDelivered, MarkShipmentShipped
from order_management.order.status import AddOrderNote, CancelOrder, UpdateOrderStatus
from order_management.projections.order_summary import OrderSummary
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.clock import utcnow


def _place(user_id=None, email="buyer@example.com", **extra):
    items = [{"variant_id": str(uuid4()), "product": {"title": "Wrap Dress"}, "quantity": 1, "unit_price": 120.0}]
    return current_domain.process(
        CreateOrder(
            user_id=user_id or str(uuid4()),
            email=email,
            items=json.dumps(items),
            shipping_address=json.dumps({"line1": "1 Main St", "city": "Kandy", "country": "LK"}),
            **extra,
        ),
        asynchronous=False,
    )


def _load(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestCreateOrder:
    def test_persists_and_projects(self):
        result = _place(shipping=10.0)
        order = _load(result["order_id"])
        assert order.order_no == result["order_no"]
        assert order.billing_address.city == "Kandy"

        summary = current_domain.repository_for(OrderSummary).get(result["order_id"])
        assert summary.grand_total == 130.0
        assert summary.status == "created"


class TestOrderStatusCommands:
    def test_update_status_updates_summary(self):
        order_id = _place()["order_id"]
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="paid"), asynchronous=False)
        assert current_domain.repository_for(OrderSummary).get(order_id).status == "paid"

    def test_invalid_status_string(self):
        order_id = _place()["order_id"]
        with pytest.raises(ValidationError):
            current_domain.process(UpdateOrderStatus(order_id=order_id, status="teleported"), asynchronous=False)

    def test_cancel_and_note(self):
        order_id = _place()["order_id"]
        current_domain.process(AddOrderNote(order_id=order_id, note="VIP"), asynchronous=False)
        current_domain.process(CancelOrder(order_id=order_id, reason="Duplicate"), asynchronous=False)
        order = _load(order_id)
        assert order.status == "cancelled"
        assert {"VIP", "Duplicate"} <= {h.note for h in order.history}


class TestOrderModificationCommands:
    def test_update_item_and_totals(self):
        order_id = _place()["order_id"]
        item_id = _load(order_id).items[0].id

        assert current_domain.process(
            UpdateOrderItem(order_id=order_id, item_id=item_id, quantity=2), asynchronous=False
        ) == 240.0
        assert current_domain.process(UpdateOrderTotals(order_id=order_id, tax=24.0), asynchronous=False) == 264.0
        assert current_domain.repository_for(OrderSummary).get(order_id).item_count == 2


class TestShipmentCommands:
    def test_full_delivery(self):
        order_id = _place()["order_id"]
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="paid"), asynchronous=False)
        shipment_id = current_domain.process(CreateShipment(order_id=order_id, carrier="FedEx"), asynchronous=False)

        status = current_domain.process(
            MarkShipmentShipped(order_id=order_id, shipment_id=shipment_id, tracking_no="FX-1"), asynchronous=False
        )
        assert status == "shipped"
        status = current_domain.process(
            MarkShipmentDelivered(order_id=order_id, shipment_id=shipment_id), asynchronous=False
        )
        assert status == "delivered"


class TestTrackOrder:
    def test_track_by_email(self):
        result = _place(email="Track@Example.com")
        tracked = queries.track_order(result["order_no"].lower(), email="track@example.com")
        assert tracked["status"] == "created"

    def test_wrong_email_hides_order(self):
        result = _place()
        with pytest.raises(ObjectNotFoundError):
            queries.track_order(result["order_no"], email="someone@else.com")


class TestListOrders:
    def test_filters_by_user(self):
        user_id = str(uuid4())
        _place(user_id=user_id)
        _place(user_id=user_id)
        _place()
        assert queries.list_orders(user_id=user_id)["total"] == 2


class TestBackordersAndPreorders:
    def test_backorder_lifecycle(self):
        item_id = str(uuid4())
        current_domain.process(
            CreateBackorder(order_item_id=item_id, promised_eta=utcnow() + timedelta(days=7)), asynchronous=False
        )
        assert len(queries.list_backorders(notified=False)) == 1

        current_domain.process(MarkBackorderNotified(order_item_id=item_id), asynchronous=False)
        assert len(queries.list_backorders(notified=True)) == 1

    def test_duplicate_backorder_rejected(self):
        item_id = str(uuid4())
        current_domain.process(CreateBackorder(order_item_id=item_id), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(CreateBackorder(order_item_id=item_id), asynchronous=False)

    def test_past_eta_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(
                CreateBackorder(order_item_id=str(uuid4()), promised_eta=utcnow() - timedelta(days=1)),
                asynchronous=False,
            )

    def test_backorder_overdue(self):
        backorder = Backorder.create(str(uuid4()), utcnow() + timedelta(days=1))
        assert backorder.is_overdue(utcnow() + timedelta(days=2)) is True

    def test_preorder_notified_once(self):
        item_id = str(uuid4())
        current_domain.process(CreatePreorder(order_item_id=item_id), asynchronous=False)
        current_domain.process(MarkPreorderNotified(order_item_id=item_id), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(MarkPreorderNotified(order_item_id=item_id), asynchronous=False)
