"""FastAPI routes for the Order Management domain."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from order_management import queries
from order_management.api.schemas import (
    AddOrderNoteRequest,
    CancelOrderRequest,
    CreateBackorderRequest,
    CreateOrderRequest,
    CreatePreorderRequest,
    CreateShipmentRequest,
    UpdateOrderItemRequest,
    UpdateOrderStatusRequest,
    UpdateOrderTotalsRequest,
)
from order_management.backorders.management import (
    CreateBackorder,
    CreatePreorder,
    MarkBackorderNotified,
    MarkPreorderNotified,
)
from order_management.order.modification import UpdateOrderItem, UpdateOrderTotals
from order_management.order.placement import CreateOrder
from order_management.order.shipping import CreateShipment, MarkShipmentDelivered, MarkShipmentShipped
from order_management.order.status import AddOrderNote, CancelOrder, UpdateOrderStatus
from shared.api import UUIDStr
from shared.auth import Principal, get_current_principal
from shared.result import CommandResult

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=CommandResult)
async def create_order(body: CreateOrderRequest) -> CommandResult:
    payload = body.model_dump()
    command = CreateOrder(
        user_id=body.user_id,
        guest_token=body.guest_token,
        email=body.email,
        items=json.dumps(payload["items"]),
        shipping_address=json.dumps(payload["shipping_address"]) if body.shipping_address else None,
        billing_address=json.dumps(payload["billing_address"]) if body.billing_address else None,
        tax=body.tax,
        shipping=body.shipping,
        discount=body.discount,
        currency=body.currency,
        source=body.source,
    )
    result = current_domain.process(command, asynchronous=False)
    return CommandResult.ok(result)


@order_router.get("", response_model=CommandResult)
async def list_orders(
    user_id: str | None = None,
    status: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> CommandResult:
    return CommandResult.ok(queries.list_orders(user_id, status, page, page_size))


@order_router.get("/mine", response_model=CommandResult)
async def list_my_orders(
    page: int = 1,
    page_size: int = 20,
    principal: Principal = Depends(get_current_principal),
) -> CommandResult:
    return CommandResult.ok(queries.list_orders(principal.user_id, page=page, page_size=page_size))


@order_router.get("/track/{order_no}", response_model=CommandResult)
async def track_order(order_no: str, email: str | None = None, guest_token: str | None = None) -> CommandResult:
    return CommandResult.ok(queries.track_order(order_no, email=email, guest_token=guest_token))


@order_router.get("/{order_id}", response_model=CommandResult)
async def get_order(order_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_order(order_id))


@order_router.put("/{order_id}/status", response_model=CommandResult)
async def update_order_status(order_id: UUIDStr, body: UpdateOrderStatusRequest) -> CommandResult:
    status = current_domain.process(
        UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note, actor="api"),
        asynchronous=False,
    )
    return CommandResult.ok({"order_id": order_id, "status": status})


@order_router.put("/{order_id}/cancel", response_model=CommandResult)
async def cancel_order(order_id: UUIDStr, body: CancelOrderRequest) -> CommandResult:
    current_domain.process(CancelOrder(order_id=order_id, reason=body.reason, actor="api"), asynchronous=False)
    return CommandResult.ok({"order_id": order_id, "status": "cancelled"})


@order_router.post("/{order_id}/notes", status_code=201, response_model=CommandResult)
async def add_order_note(order_id: UUIDStr, body: AddOrderNoteRequest) -> CommandResult:
    current_domain.process(AddOrderNote(order_id=order_id, note=body.note, actor="api"), asynchronous=False)
    return CommandResult.ok({"order_id": order_id})


@order_router.put("/{order_id}/items/{item_id}", response_model=CommandResult)
async def update_order_item(order_id: UUIDStr, item_id: UUIDStr, body: UpdateOrderItemRequest) -> CommandResult:
    grand_total = current_domain.process(
        UpdateOrderItem(order_id=order_id, item_id=item_id, quantity=body.quantity), asynchronous=False
    )
    return CommandResult.ok({"order_id": order_id, "grand_total": grand_total})


@order_router.put("/{order_id}/totals", response_model=CommandResult)
async def update_order_totals(order_id: UUIDStr, body: UpdateOrderTotalsRequest) -> CommandResult:
    grand_total = current_domain.process(UpdateOrderTotals(order_id=order_id, **body.model_dump()), asynchronous=False)
    return CommandResult.ok({"order_id": order_id, "grand_total": grand_total})


@order_router.post("/{order_id}/shipments", status_code=201, response_model=CommandResult)
async def create_shipment(order_id: UUIDStr, body: CreateShipmentRequest) -> CommandResult:
    shipment_id = current_domain.process(CreateShipment(order_id=order_id, **body.model_dump()), asynchronous=False)
    return CommandResult.ok({"order_id": order_id, "shipment_id": shipment_id})


@order_router.put("/{order_id}/shipments/{shipment_id}/shipped", response_model=CommandResult)
async def mark_shipment_shipped(
    order_id: UUIDStr, shipment_id: UUIDStr, body: CreateShipmentRequest | None = None
) -> CommandResult:
    extra = body.model_dump() if body else {}
    status = current_domain.process(
        MarkShipmentShipped(order_id=order_id, shipment_id=shipment_id, **extra), asynchronous=False
    )
    return CommandResult.ok({"order_id": order_id, "shipment_id": shipment_id, "order_status": status})


@order_router.put("/{order_id}/shipments/{shipment_id}/delivered", response_model=CommandResult)
async def mark_shipment_delivered(order_id: UUIDStr, shipment_id: UUIDStr) -> CommandResult:
    status = current_domain.process(
        MarkShipmentDelivered(order_id=order_id, shipment_id=shipment_id), asynchronous=False
    )
    return CommandResult.ok({"order_id": order_id, "shipment_id": shipment_id, "order_status": status})


# ---------------------------------------------------------------------------
# Backorder & Preorder Router
# ---------------------------------------------------------------------------
fulfillment_router = APIRouter(tags=["backorders"])


@fulfillment_router.post("/backorders", status_code=201, response_model=CommandResult)
async def create_backorder(body: CreateBackorderRequest) -> CommandResult:
    backorder_id = current_domain.process(CreateBackorder(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"backorder_id": backorder_id})


@fulfillment_router.get("/backorders", response_model=CommandResult)
async def list_backorders(notified: bool | None = None) -> CommandResult:
    return CommandResult.ok(queries.list_backorders(notified))


@fulfillment_router.put("/backorders/{order_item_id}/notified", response_model=CommandResult)
async def mark_backorder_notified(order_item_id: UUIDStr) -> CommandResult:
    current_domain.process(MarkBackorderNotified(order_item_id=order_item_id), asynchronous=False)
    return CommandResult.ok({"order_item_id": order_item_id})


@fulfillment_router.post("/preorders", status_code=201, response_model=CommandResult)
async def create_preorder(body: CreatePreorderRequest) -> CommandResult:
    preorder_id = current_domain.process(CreatePreorder(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"preorder_id": preorder_id})


@fulfillment_router.get("/preorders", response_model=CommandResult)
async def list_preorders(notified: bool | None = None) -> CommandResult:
    return CommandResult.ok(queries.list_preorders(notified))


@fulfillment_router.put("/preorders/{order_item_id}/notified", response_model=CommandResult)
async def mark_preorder_notified(order_item_id: UUIDStr) -> CommandResult:
    current_domain.process(MarkPreorderNotified(order_item_id=order_item_id), asynchronous=False)
    return CommandResult.ok({"order_item_id": order_item_id})
