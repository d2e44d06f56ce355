"""Modett FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix,
and every response uses the CommandResult envelope.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from analytics.domain import analytics
from cart.domain import cart
from customer_care.domain import customer_care
from engagement.domain import engagement
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from order_management.domain import order_management
from payment_loyalty.domain import payment_loyalty
from product_catalog.domain import product_catalog
from shared.api import register_envelope_handlers
from shared.logging import add_context, clear_context, configure_logging
from shared.settings import get_settings
from user_management.domain import user_management

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied:
#   - default      → event_processing = "sync"  (projectors fire in UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
configure_logging()

DOMAINS = (
    product_catalog,
    cart,
    order_management,
    payment_loyalty,
    customer_care,
    engagement,
    user_management,
    analytics,
)

for _domain in DOMAINS:
    _domain.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/products": product_catalog,
    "/categories": product_catalog,
    "/carts": cart,
    "/checkouts": cart,
    "/reservations": cart,
    "/orders": order_management,
    "/backorders": order_management,
    "/preorders": order_management,
    "/payments": payment_loyalty,
    "/gift-cards": payment_loyalty,
    "/loyalty": payment_loyalty,
    "/promotions": payment_loyalty,
    "/bnpl": payment_loyalty,
    "/tickets": customer_care,
    "/support-agents": customer_care,
    "/chats": customer_care,
    "/returns": customer_care,
    "/repairs": customer_care,
    "/goodwill": customer_care,
    "/feedback": customer_care,
    "/wishlists": engagement,
    "/reviews": engagement,
    "/newsletter": engagement,
    "/reminders": engagement,
    "/appointments": engagement,
    "/notifications": engagement,
    "/auth": user_management,
    "/users": user_management,
    "/analytics": analytics,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path == prefix or path.startswith(prefix + "/"):
            return domain
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Modett API",
    description="Apparel e-commerce platform: catalog, carts, orders, payments, care, engagement and analytics",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_envelope_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is None:
        # No domain match: health check, docs, etc.
        return await call_next(request)

    add_context(domain=domain.name, path=request.url.path, method=request.method)
    try:
        with domain.domain_context():
            return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from analytics.api import router as analytics_router  # noqa: E402
from cart.api import cart_router, checkout_router, reservation_router  # noqa: E402
from customer_care.api import (  # noqa: E402
    aftercare_router,
    agent_router,
    chat_router,
    return_router,
    ticket_router,
)
from engagement.api import (  # noqa: E402
    appointment_router,
    newsletter_router,
    notification_router,
    reminder_router,
    review_router,
    wishlist_router,
)
from order_management.api import fulfillment_router, order_router  # noqa: E402
from payment_loyalty.api import (  # noqa: E402
    bnpl_router,
    gift_card_router,
    loyalty_router,
    payment_router,
    promotion_router,
)
from product_catalog.api import category_router, product_router  # noqa: E402
from user_management.api import auth_router, user_router  # noqa: E402

for _router in (
    product_router,
    category_router,
    cart_router,
    checkout_router,
    reservation_router,
    order_router,
    fulfillment_router,
    payment_router,
    gift_card_router,
    loyalty_router,
    promotion_router,
    bnpl_router,
    ticket_router,
    agent_router,
    chat_router,
    return_router,
    aftercare_router,
    wishlist_router,
    review_router,
    newsletter_router,
    reminder_router,
    appointment_router,
    notification_router,
    auth_router,
    user_router,
    analytics_router,
):
    app.include_router(_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "environment": get_settings().PROTEAN_ENV,
            "domains": {domain.name: {"name": domain.name} for domain in DOMAINS},
        }
    )
