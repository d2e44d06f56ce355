"""Order Management API package."""

from order_management.api.routes import fulfillment_router, order_router

__all__ = ["order_router", "fulfillment_router"]
