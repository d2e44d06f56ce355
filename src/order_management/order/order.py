"""Order aggregate with line items, status history and shipments.

Status changes go through `change_status`, which checks the transition table
and appends a history entry. Corrections (one step back) are allowed for the
early statuses, and a cancelled order may be reinstated.

State Machine:
    CREATED → PENDING | CONFIRMED | PAID | CANCELLED
    PENDING → CREATED | CONFIRMED | PAID | CANCELLED
    CONFIRMED → PENDING | PAID | PROCESSING | CANCELLED
    PAID → CONFIRMED | PROCESSING | SHIPPED | FULFILLED | REFUNDED | CANCELLED
    PROCESSING → PAID | SHIPPED | FULFILLED | REFUNDED | CANCELLED
    SHIPPED → PROCESSING | DELIVERED | PARTIALLY_RETURNED | REFUNDED
    DELIVERED → PARTIALLY_RETURNED | REFUNDED
    FULFILLED → DELIVERED | PARTIALLY_RETURNED | REFUNDED
    PARTIALLY_RETURNED → REFUNDED
    CANCELLED → CREATED | PENDING | CONFIRMED | PAID | PROCESSING
"""

from uuid import uuid4

from protean import atomic_change
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from order_management.domain import order_management
from order_management.order.events import (
    OrderPlaced,
    OrderStatusChanged,
    OrderTotalsChanged,
    ShipmentStatusChanged,
)
from shared.clock import utcnow
from shared.money import SUPPORTED_CURRENCIES, round_money
from shared.status import StatusEnum, assert_transition


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(StatusEnum):
    CREATED = "created"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    FULFILLED = "fulfilled"
    PARTIALLY_RETURNED = "partially_returned"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class OrderSource(StatusEnum):
    WEB = "web"
    MOBILE = "mobile"
    POS = "pos"

    @classmethod
    def field_name(cls):
        return "source"


class ShipmentStatus(StatusEnum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


_VALID_TRANSITIONS = {
    OrderStatus.CREATED: {
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PAID,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PENDING: {
        OrderStatus.CREATED,  # Correction
        OrderStatus.CONFIRMED,
        OrderStatus.PAID,
        OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.PENDING,  # Correction
        OrderStatus.PAID,
        OrderStatus.PROCESSING,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PAID: {
        OrderStatus.CONFIRMED,  # Correction
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.FULFILLED,
        OrderStatus.REFUNDED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.PAID,  # Correction
        OrderStatus.SHIPPED,
        OrderStatus.FULFILLED,
        OrderStatus.REFUNDED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.SHIPPED: {
        OrderStatus.PROCESSING,  # Correction
        OrderStatus.DELIVERED,
        OrderStatus.PARTIALLY_RETURNED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.DELIVERED: {OrderStatus.PARTIALLY_RETURNED, OrderStatus.REFUNDED},
    OrderStatus.FULFILLED: {
        OrderStatus.DELIVERED,
        OrderStatus.PARTIALLY_RETURNED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.PARTIALLY_RETURNED: {OrderStatus.REFUNDED},
    OrderStatus.REFUNDED: set(),  # Terminal
    OrderStatus.CANCELLED: {
        OrderStatus.CREATED,
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PAID,
        OrderStatus.PROCESSING,
    },
}

# Line items may only change before the order is confirmed
_EDITABLE_STATES = {OrderStatus.CREATED, OrderStatus.PENDING}


def generate_order_no() -> str:
    return f"ORD-{uuid4().hex[:8].upper()}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@order_management.value_object(part_of="Order")
class AddressSnapshot:
    """Address as it was when the order was placed."""

    first_name = String(max_length=100)
    last_name = String(max_length=100)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    region = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(required=True, max_length=2)
    phone = String(max_length=30)


@order_management.value_object(part_of="Order")
class ProductSnapshot:
    title = String(required=True, max_length=255)
    sku = String(max_length=64)
    size = String(max_length=20)
    color = String(max_length=50)


@order_management.value_object(part_of="Order")
class OrderTotals:
    """Monetary summary; grand_total = subtotal + tax + shipping - discount."""

    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    grand_total = Float(default=0.0, min_value=0.0)

    @classmethod
    def calculate(cls, subtotal, tax=0.0, shipping=0.0, discount=0.0):
        subtotal, tax, shipping, discount = (round_money(v or 0.0) for v in (subtotal, tax, shipping, discount))
        return cls(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            discount=discount,
            grand_total=max(round_money(subtotal + tax + shipping - discount), 0.0),
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@order_management.entity(part_of="Order")
class OrderItem:
    variant_id = Identifier(required=True)
    product_snapshot = ValueObject(ProductSnapshot)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    is_gift = Boolean(default=False)
    gift_message = String(max_length=500)

    @property
    def line_total(self) -> float:
        return round_money(self.quantity * self.unit_price)


@order_management.entity(part_of="Order")
class OrderHistoryEntry:
    from_status = String(max_length=30)
    to_status = String(required=True, max_length=30)
    note = String(max_length=1000)
    actor = String(max_length=100)
    created_at = DateTime(required=True)


@order_management.entity(part_of="Order")
class OrderShipment:
    carrier = String(max_length=100)
    tracking_no = String(max_length=255)
    status = String(choices=ShipmentStatus, default=ShipmentStatus.PENDING.value)
    shipped_at = DateTime()
    delivered_at = DateTime()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@order_management.aggregate
class Order:
    order_no = String(required=True, max_length=20)
    user_id = Identifier()
    guest_token = String(max_length=255)
    email = String(max_length=254)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(AddressSnapshot)
    billing_address = ValueObject(AddressSnapshot)
    totals = ValueObject(OrderTotals)
    currency = String(max_length=3, default="USD")
    source = String(choices=OrderSource, default=OrderSource.WEB.value)
    status = String(choices=OrderStatus, default=OrderStatus.CREATED.value)
    history = HasMany(OrderHistoryEntry)
    shipments = HasMany(OrderShipment)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        items_data,
        user_id=None,
        guest_token=None,
        email=None,
        shipping_address=None,
        billing_address=None,
        tax=0.0,
        shipping=0.0,
        discount=0.0,
        currency="USD",
        source="web",
    ):
        """Place an order.

        Args:
            items_data: list of dicts with variant_id, quantity, unit_price,
                is_gift, gift_message and a `product` dict (title, sku, size,
                color).
            shipping_address / billing_address: address dicts, billing
                defaults to the shipping address.
        """
        if not user_id and not guest_token:
            raise ValidationError({"order": ["An order needs a user id or a guest token"]})
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})
        currency = (currency or "USD").upper()
        if currency not in SUPPORTED_CURRENCIES:
            raise ValidationError({"currency": [f"Unsupported currency: {currency}"]})

        now = utcnow()
        items = [cls._build_item(data) for data in items_data]
        subtotal = sum(item.line_total for item in items)
        order = cls(
            order_no=generate_order_no(),
            user_id=user_id,
            guest_token=guest_token,
            email=email.strip().lower() if email else None,
            items=items,
            shipping_address=AddressSnapshot(**shipping_address) if shipping_address else None,
            billing_address=AddressSnapshot(**(billing_address or shipping_address))
            if (billing_address or shipping_address)
            else None,
            totals=OrderTotals.calculate(subtotal, tax, shipping, discount),
            currency=currency,
            source=OrderSource.from_string(source).value,
            created_at=now,
            updated_at=now,
        )
        order.add_history(
            OrderHistoryEntry(to_status=OrderStatus.CREATED.value, note="Order placed", actor="system", created_at=now)
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_no=order.order_no,
                user_id=str(user_id) if user_id else None,
                status=order.status,
                item_count=order.item_count(),
                grand_total=order.totals.grand_total,
                currency=currency,
                created_at=now,
            )
        )
        return order

    @staticmethod
    def _build_item(data):
        product = data.get("product") or {}
        if data.get("is_gift") and not (data.get("gift_message") or "").strip():
            raise ValidationError({"gift_message": ["A gift message is required for gift items"]})
        return OrderItem(
            variant_id=data["variant_id"],
            product_snapshot=ProductSnapshot(**product) if product else None,
            quantity=data["quantity"],
            unit_price=round_money(data["unit_price"]),
            is_gift=bool(data.get("is_gift")),
            gift_message=data.get("gift_message"),
        )

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def change_status(self, target, note=None, actor=None):
        """Move to `target`; setting the current status again is a no-op."""
        target = OrderStatus.from_string(target)
        current = OrderStatus.from_string(self.status)
        if target == current:
            return False
        assert_transition(_VALID_TRANSITIONS, current, target)

        now = utcnow()
        self.status = target.value
        self.updated_at = now
        self.add_history(
            OrderHistoryEntry(
                from_status=current.value,
                to_status=target.value,
                note=note,
                actor=actor,
                created_at=now,
            )
        )
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                from_status=current.value,
                to_status=target.value,
                note=note,
                changed_at=now,
            )
        )
        return True

    def cancel(self, reason, actor=None):
        if not (reason or "").strip():
            raise ValidationError({"reason": ["A cancellation reason is required"]})
        self.change_status(OrderStatus.CANCELLED, note=reason.strip(), actor=actor)

    def add_note(self, note, actor=None):
        """Append a system note without changing the status."""
        if not (note or "").strip():
            raise ValidationError({"note": ["Note cannot be empty"]})
        self.add_history(
            OrderHistoryEntry(
                from_status=self.status,
                to_status=self.status,
                note=note.strip(),
                actor=actor,
                created_at=utcnow(),
            )
        )

    # -------------------------------------------------------------------
    # Items & totals
    # -------------------------------------------------------------------
    def _totals_changed(self):
        now = utcnow()
        self.updated_at = now
        self.raise_(
            OrderTotalsChanged(
                order_id=str(self.id),
                item_count=self.item_count(),
                grand_total=self.totals.grand_total,
                updated_at=now,
            )
        )

    def update_item(self, item_id, quantity):
        if OrderStatus.from_string(self.status) not in _EDITABLE_STATES:
            raise ValidationError({"items": [f"Items cannot be changed once the order is {self.status}"]})
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": [f"Item {item_id} not found in order"]})
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        with atomic_change(self):
            item.quantity = quantity
            self.totals = OrderTotals.calculate(
                sum(i.line_total for i in self.items),
                self.totals.tax,
                self.totals.shipping,
                self.totals.discount,
            )
        self._totals_changed()

    def update_totals(self, tax=None, shipping=None, discount=None):
        current = self.totals
        self.totals = OrderTotals.calculate(
            current.subtotal,
            current.tax if tax is None else tax,
            current.shipping if shipping is None else shipping,
            current.discount if discount is None else discount,
        )
        self._totals_changed()

    # -------------------------------------------------------------------
    # Shipments
    # -------------------------------------------------------------------
    def _find_shipment(self, shipment_id):
        shipment = next((s for s in self.shipments if str(s.id) == str(shipment_id)), None)
        if shipment is None:
            raise ValidationError({"shipment_id": [f"Shipment {shipment_id} not found"]})
        return shipment

    def _shipment_changed(self, shipment):
        self.updated_at = utcnow()
        self.raise_(
            ShipmentStatusChanged(
                order_id=str(self.id),
                shipment_id=str(shipment.id),
                status=shipment.status,
                carrier=shipment.carrier,
                tracking_no=shipment.tracking_no,
            )
        )

    def create_shipment(self, carrier=None, tracking_no=None):
        if self.status in (OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value):
            raise ValidationError({"status": [f"Cannot ship a {self.status} order"]})
        shipment = OrderShipment(carrier=carrier, tracking_no=tracking_no)
        self.add_shipments(shipment)
        self._shipment_changed(shipment)
        return shipment

    def mark_shipment_shipped(self, shipment_id, carrier=None, tracking_no=None):
        shipment = self._find_shipment(shipment_id)
        if shipment.status != ShipmentStatus.PENDING.value:
            raise ValidationError({"shipment": [f"Shipment is already {shipment.status}"]})

        shipment.status = ShipmentStatus.SHIPPED.value
        shipment.shipped_at = utcnow()
        if carrier:
            shipment.carrier = carrier
        if tracking_no:
            shipment.tracking_no = tracking_no
        self._shipment_changed(shipment)

        current = OrderStatus.from_string(self.status)
        if current.can_transition_to(OrderStatus.SHIPPED, _VALID_TRANSITIONS):
            self.change_status(OrderStatus.SHIPPED, note=f"Shipment {shipment.tracking_no or shipment.id} dispatched")

    def mark_shipment_delivered(self, shipment_id):
        shipment = self._find_shipment(shipment_id)
        if shipment.status != ShipmentStatus.SHIPPED.value:
            raise ValidationError({"shipment": ["Only shipped shipments can be delivered"]})

        shipment.status = ShipmentStatus.DELIVERED.value
        shipment.delivered_at = utcnow()
        self._shipment_changed(shipment)

        all_delivered = all(s.status == ShipmentStatus.DELIVERED.value for s in self.shipments)
        current = OrderStatus.from_string(self.status)
        if all_delivered and current.can_transition_to(OrderStatus.DELIVERED, _VALID_TRANSITIONS):
            self.change_status(OrderStatus.DELIVERED, note="All shipments delivered")
