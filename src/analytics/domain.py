"""Analytics bounded context: storefront behaviour events and their rollups."""

import structlog
from protean.domain import Domain

analytics = Domain(name="analytics")

logger = structlog.get_logger(__name__)
