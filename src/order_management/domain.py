"""Order Management bounded context: orders, shipments, backorders and preorders.

Orders keep an explicit history of status changes and system notes. Status
changes are validated against the order transition table.
"""

import structlog
from protean.domain import Domain

order_management = Domain(name="order_management")

logger = structlog.get_logger(__name__)
