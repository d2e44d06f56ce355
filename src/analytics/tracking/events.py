"""Domain events for the AnalyticsEvent aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from analytics.domain import analytics


@analytics.event(part_of="AnalyticsEvent")
class EventTracked:
    """A storefront interaction was recorded.

    Quantity and amount are only set for cart and purchase events.
    """

    __version__ = 1

    analytics_event_id = Identifier(required=True)
    event_type = String(required=True)
    product_id = Identifier()
    quantity = Integer()
    amount = Float()
    event_timestamp = DateTime(required=True)
