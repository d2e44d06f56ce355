"""Customer Care API package."""

from customer_care.api.routes import aftercare_router, agent_router, chat_router, return_router, ticket_router

__all__ = ["ticket_router", "agent_router", "chat_router", "return_router", "aftercare_router"]
