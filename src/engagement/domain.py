"""Engagement bounded context: wishlists, product reviews, newsletter
subscriptions, restock and price-drop reminders, styling appointments and
outbound notifications.
"""

import structlog
from protean.domain import Domain

engagement = Domain(name="engagement")

logger = structlog.get_logger(__name__)
