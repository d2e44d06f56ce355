"""User Management API package."""

from user_management.api.routes import auth_router, user_router

__all__ = ["auth_router", "user_router"]
