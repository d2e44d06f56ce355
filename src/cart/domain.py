"""Cart bounded context: shopping carts, checkout sessions and stock holds.

Carts belong either to a signed-in user or to a guest token. A checkout
snapshots a cart's total for a short window; reservations hold variant stock
for a cart while the shopper finishes.
"""

import structlog
from protean.domain import Domain

cart = Domain(name="cart")

logger = structlog.get_logger(__name__)
