"""Product Catalog API package."""

from product_catalog.api.routes import category_router, product_router

__all__ = ["product_router", "category_router"]
