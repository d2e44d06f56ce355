"""Tracking commands.

`TrackEvent` records any interaction type; `TrackProductView` and
`TrackPurchase` are the shapes the storefront sends most often. A purchase is
recorded as one event per order line so product rollups stay per product.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from analytics.domain import analytics, logger
from analytics.tracking.event import AnalyticsEvent, AnalyticsEventType


def _load_json(raw, field, expected=dict):
    if not raw:
        return expected()
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise ValidationError({field: [f"{field} is not valid JSON"]}) from exc
    if not isinstance(value, expected):
        raise ValidationError({field: [f"{field} must be a JSON {expected.__name__}"]})
    return value


@analytics.command(part_of="AnalyticsEvent")
class TrackEvent:
    user_id = Identifier()
    guest_token = String(max_length=255)
    session_id = String(required=True, max_length=255)
    user_agent = String(max_length=500)
    ip_address = String(max_length=45)
    referrer = String(max_length=500)
    event_type = String(required=True, max_length=30)
    product_id = Identifier()
    variant_id = Identifier()
    cart_id = Identifier()
    event_data = Text()  # JSON object


@analytics.command(part_of="AnalyticsEvent")
class TrackProductView:
    user_id = Identifier()
    guest_token = String(max_length=255)
    session_id = String(required=True, max_length=255)
    user_agent = String(max_length=500)
    ip_address = String(max_length=45)
    referrer = String(max_length=500)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    source = String(max_length=30)  # search, category, recommendation, direct
    search_query = String(max_length=255)
    category_id = Identifier()


@analytics.command(part_of="AnalyticsEvent")
class TrackPurchase:
    user_id = Identifier()
    guest_token = String(max_length=255)
    session_id = String(required=True, max_length=255)
    user_agent = String(max_length=500)
    ip_address = String(max_length=45)
    referrer = String(max_length=500)
    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of {product_id, variant_id, quantity, price}
    total_amount = Float(min_value=0.0)


def _visitor(command) -> dict:
    return {
        "session_id": command.session_id,
        "user_id": command.user_id,
        "guest_token": command.guest_token,
        "user_agent": command.user_agent,
        "ip_address": command.ip_address,
        "referrer": command.referrer,
    }


@analytics.command_handler(part_of=AnalyticsEvent)
class TrackingHandler:
    @handle(TrackEvent)
    def track_event(self, command):
        event = AnalyticsEvent.record(
            event_type=command.event_type,
            product_id=command.product_id,
            variant_id=command.variant_id,
            cart_id=command.cart_id,
            event_data=_load_json(command.event_data, "event_data"),
            **_visitor(command),
        )
        current_domain.repository_for(AnalyticsEvent).add(event)
        return str(event.id)

    @handle(TrackProductView)
    def track_product_view(self, command):
        context = {
            key: value
            for key, value in (
                ("source", command.source),
                ("search_query", command.search_query),
                ("category_id", str(command.category_id) if command.category_id else None),
            )
            if value
        }
        event = AnalyticsEvent.record(
            event_type=AnalyticsEventType.PRODUCT_VIEW,
            product_id=command.product_id,
            variant_id=command.variant_id,
            event_data=context,
            **_visitor(command),
        )
        current_domain.repository_for(AnalyticsEvent).add(event)
        return str(event.id)

    @handle(TrackPurchase)
    def track_purchase(self, command):
        items = _load_json(command.items, "items", expected=list)
        if not items:
            raise ValidationError({"items": ["A purchase needs at least one item"]})

        repo = current_domain.repository_for(AnalyticsEvent)
        ids = []
        for item in items:
            if not item.get("product_id"):
                raise ValidationError({"items": ["Every purchased item needs a product_id"]})
            event = AnalyticsEvent.record(
                event_type=AnalyticsEventType.PURCHASE,
                product_id=item["product_id"],
                variant_id=item.get("variant_id"),
                order_id=command.order_id,
                event_data={
                    "quantity": item.get("quantity", 1),
                    "price": item.get("price"),
                    "total_amount": command.total_amount,
                },
                **_visitor(command),
            )
            repo.add(event)
            ids.append(str(event.id))

        logger.info("Purchase tracked", order_id=str(command.order_id), lines=len(ids))
        return ids
