"""Analytics API package."""

from analytics.api.routes import router

__all__ = ["router"]
