"""User Management bounded context: accounts, credentials, addresses and saved payment methods."""

import structlog
from protean.domain import Domain

user_management = Domain(name="user_management")

logger = structlog.get_logger(__name__)
