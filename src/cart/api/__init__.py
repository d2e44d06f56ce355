"""Cart API package."""

from cart.api.routes import cart_router, checkout_router, reservation_router

__all__ = ["cart_router", "checkout_router", "reservation_router"]
