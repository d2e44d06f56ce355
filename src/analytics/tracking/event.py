"""AnalyticsEvent aggregate: one recorded storefront interaction."""

import json

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from analytics.domain import analytics
from analytics.tracking.events import EventTracked
from shared.clock import utcnow
from shared.status import StatusEnum


class AnalyticsEventType(StatusEnum):
    PRODUCT_VIEW = "product_view"
    ADD_TO_CART = "add_to_cart"
    REMOVE_FROM_CART = "remove_from_cart"
    BEGIN_CHECKOUT = "begin_checkout"
    PURCHASE = "purchase"
    SEARCH = "search"
    WISHLIST_ADD = "wishlist_add"

    @classmethod
    def field_name(cls):
        return "event_type"


PRODUCT_EVENTS = frozenset(
    {
        AnalyticsEventType.PRODUCT_VIEW,
        AnalyticsEventType.ADD_TO_CART,
        AnalyticsEventType.REMOVE_FROM_CART,
        AnalyticsEventType.PURCHASE,
        AnalyticsEventType.WISHLIST_ADD,
    }
)


@analytics.aggregate
class AnalyticsEvent:
    event_type = String(choices=AnalyticsEventType, required=True)
    user_id = Identifier()
    guest_token = String(max_length=255)
    session_id = String(required=True, max_length=255)
    product_id = Identifier()
    variant_id = Identifier()
    cart_id = Identifier()
    order_id = Identifier()
    event_data = Text()  # JSON object
    user_agent = String(max_length=500)
    ip_address = String(max_length=45)
    referrer = String(max_length=500)
    event_timestamp = DateTime(required=True)

    @invariant.post
    def attributed_to_exactly_one_of_user_or_guest(self):
        if bool(self.user_id) == bool(self.guest_token):
            raise ValidationError({"user_id": ["Either user_id or guest_token is required, not both"]})

    @invariant.post
    def product_events_name_a_product(self):
        if AnalyticsEventType.from_string(self.event_type) in PRODUCT_EVENTS and not self.product_id:
            raise ValidationError({"product_id": [f"product_id is required for {self.event_type} events"]})

    @classmethod
    def record(cls, event_type, session_id, user_id=None, guest_token=None, event_data=None, **context):
        event_type = AnalyticsEventType.from_string(event_type)
        if not (session_id or "").strip():
            raise ValidationError({"session_id": ["Session id is required"]})
        data = event_data or {}
        event = cls(
            event_type=event_type.value,
            session_id=session_id.strip(),
            user_id=user_id,
            guest_token=guest_token,
            event_data=json.dumps(data),
            event_timestamp=context.pop("event_timestamp", None) or utcnow(),
            **context,
        )
        event.raise_(
            EventTracked(
                analytics_event_id=str(event.id),
                event_type=event.event_type,
                product_id=str(event.product_id) if event.product_id else None,
                quantity=data.get("quantity"),
                amount=data.get("price"),
                event_timestamp=event.event_timestamp,
            )
        )
        return event

    def data(self) -> dict:
        return json.loads(self.event_data) if self.event_data else {}
