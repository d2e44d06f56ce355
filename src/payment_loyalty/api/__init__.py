"""Payment & Loyalty API package."""

from payment_loyalty.api.routes import (
    bnpl_router,
    gift_card_router,
    loyalty_router,
    payment_router,
    promotion_router,
)

__all__ = ["payment_router", "gift_card_router", "loyalty_router", "promotion_router", "bnpl_router"]
