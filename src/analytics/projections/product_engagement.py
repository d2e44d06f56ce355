"""ProductEngagement: per-product funnel counters and view-to-purchase conversion."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer
from protean.utils.globals import current_domain

from analytics.domain import analytics
from analytics.tracking.event import AnalyticsEvent, AnalyticsEventType
from analytics.tracking.events import EventTracked

_COUNTERS = {
    AnalyticsEventType.PRODUCT_VIEW.value: "views",
    AnalyticsEventType.ADD_TO_CART.value: "add_to_carts",
    AnalyticsEventType.REMOVE_FROM_CART.value: "remove_from_carts",
    AnalyticsEventType.WISHLIST_ADD.value: "wishlist_adds",
    AnalyticsEventType.PURCHASE.value: "purchases",
}


@analytics.projection
class ProductEngagement:
    product_id = Identifier(identifier=True, required=True)
    views = Integer(default=0)
    add_to_carts = Integer(default=0)
    remove_from_carts = Integer(default=0)
    wishlist_adds = Integer(default=0)
    purchases = Integer(default=0)
    units_sold = Integer(default=0)
    conversion_rate = Float(default=0.0)
    last_event_at = DateTime()


@analytics.projector(projector_for=ProductEngagement, aggregates=[AnalyticsEvent])
class ProductEngagementProjector:
    @on(EventTracked)
    def on_event_tracked(self, event):
        counter = _COUNTERS.get(event.event_type)
        if counter is None or not event.product_id:
            return

        repo = current_domain.repository_for(ProductEngagement)
        try:
            engagement = repo.get(event.product_id)
        except ObjectNotFoundError:
            engagement = ProductEngagement(product_id=event.product_id)

        setattr(engagement, counter, getattr(engagement, counter) + 1)
        if counter == "purchases":
            engagement.units_sold += event.quantity or 1
        engagement.conversion_rate = (
            round(engagement.purchases / engagement.views, 4) if engagement.views else 0.0
        )
        engagement.last_event_at = event.event_timestamp
        repo.add(engagement)
