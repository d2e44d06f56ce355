"""Customer Care bounded context: support tickets, agents, live chat, returns,
repairs, goodwill gestures and customer feedback.

Every status lifecycle here is transition-checked; a closed ticket only
comes back through an explicit reopen.
"""

import structlog
from protean.domain import Domain

customer_care = Domain(name="customer_care")

logger = structlog.get_logger(__name__)
