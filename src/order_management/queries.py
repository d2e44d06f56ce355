"""Read-side queries for orders, backorders and preorders."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from order_management.backorders.backorder import Backorder, Preorder
from order_management.order.order import Order, OrderStatus
from order_management.projections.order_summary import OrderSummary
from shared.clock import as_aware
from shared.paging import paginate


def _order_dict(order) -> dict:
    data = order.to_dict()
    data["item_count"] = order.item_count()
    data["history"] = sorted(data.get("history", []), key=lambda h: str(h["created_at"]))
    return data


def get_order(order_id: str) -> dict:
    return _order_dict(current_domain.repository_for(Order).get(order_id))


def list_orders(user_id: str | None = None, status: str | None = None, page: int = 1, page_size: int = 20) -> dict:
    dao = current_domain.repository_for(OrderSummary)._dao
    filters = {}
    if user_id:
        filters["user_id"] = user_id
    if status:
        filters["status"] = OrderStatus.from_string(status).value
    summaries = dao.query.filter(**filters).all().items if filters else dao.query.all().items

    summaries = sorted(summaries, key=lambda s: as_aware(s.created_at), reverse=True)
    result = paginate(summaries, page, page_size)
    result["items"] = [s.to_dict() for s in result["items"]]
    return result


def track_order(order_no: str, email: str | None = None, guest_token: str | None = None) -> dict:
    """Look up an order by number, proving ownership with its email or guest token."""
    dao = current_domain.repository_for(Order)._dao
    orders = dao.query.filter(order_no=(order_no or "").strip().upper()).all().items
    order = orders[0] if orders else None

    verified = order is not None and (
        (email and order.email == email.strip().lower()) or (guest_token and order.guest_token == guest_token)
    )
    if not verified:
        raise ObjectNotFoundError("Order not found")

    return {
        "order_no": order.order_no,
        "status": order.status,
        "shipments": [s.to_dict() for s in order.shipments],
        "history": [{"status": h.to_status, "note": h.note, "at": h.created_at} for h in order.history],
    }


def list_backorders(notified: bool | None = None) -> list[dict]:
    records = current_domain.repository_for(Backorder)._dao.query.all().items
    if notified is not None:
        records = [r for r in records if (r.notified_at is not None) == notified]
    return [r.to_dict() for r in records]


def list_preorders(notified: bool | None = None) -> list[dict]:
    records = current_domain.repository_for(Preorder)._dao.query.all().items
    if notified is not None:
        records = [r for r in records if (r.notified_at is not None) == notified]
    return [r.to_dict() for r in records]
