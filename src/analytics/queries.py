"""Read-side queries over the analytics projections."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from analytics.projections.daily_event_counts import DailyEventCounts
from analytics.projections.product_engagement import ProductEngagement
from analytics.tracking.event import AnalyticsEventType

_ENGAGEMENT_FIELDS = (
    "views",
    "add_to_carts",
    "remove_from_carts",
    "wishlist_adds",
    "purchases",
    "units_sold",
    "conversion_rate",
)


def _engagement_dict(engagement) -> dict:
    data = {field: getattr(engagement, field) for field in _ENGAGEMENT_FIELDS}
    data["product_id"] = str(engagement.product_id)
    return data


def product_engagement(product_id: str) -> dict:
    try:
        engagement = current_domain.repository_for(ProductEngagement).get(product_id)
    except ObjectNotFoundError:
        return {"product_id": product_id, **{field: 0 for field in _ENGAGEMENT_FIELDS}, "conversion_rate": 0.0}
    return _engagement_dict(engagement)


def top_viewed_products(limit: int = 10) -> list[dict]:
    rows = current_domain.repository_for(ProductEngagement)._dao.query.all().items
    ranked = sorted((r for r in rows if r.views), key=lambda r: (-r.views, -r.purchases, str(r.product_id)))
    return [_engagement_dict(r) for r in ranked[: max(limit, 0)]]


def daily_counts(date_from: str | None = None, date_to: str | None = None, event_type: str | None = None) -> list[dict]:
    """Counts per day and type, oldest day first. Dates are ISO `YYYY-MM-DD` strings."""
    dao = current_domain.repository_for(DailyEventCounts)._dao
    if event_type:
        rows = dao.query.filter(event_type=AnalyticsEventType.from_string(event_type).value).all().items
    else:
        rows = dao.query.all().items
    rows = [r for r in rows if (not date_from or r.date >= date_from) and (not date_to or r.date <= date_to)]
    return [
        {"date": r.date, "event_type": r.event_type, "count": r.event_count}
        for r in sorted(rows, key=lambda r: (r.date, r.event_type))
    ]
