"""Payment & Loyalty bounded context.

Payment intents and their transactions, gift cards, loyalty accounts,
promotions and buy-now-pay-later plans. Providers are recorded by name; no
gateway is called from here.
"""

import structlog
from protean.domain import Domain

payment_loyalty = Domain(name="payment_loyalty")

logger = structlog.get_logger(__name__)
