"""Domain events for the SupportTicket aggregate."""

from protean.fields import DateTime, Identifier, String

from customer_care.domain import customer_care


@customer_care.event(part_of="SupportTicket")
class TicketOpened:
    __version__ = 1

    ticket_id = Identifier(required=True)
    user_id = Identifier()
    order_id = Identifier()
    source = String(required=True)
    subject = String(required=True)
    priority = String()
    opened_at = DateTime(required=True)


@customer_care.event(part_of="SupportTicket")
class TicketStatusChanged:
    __version__ = 1

    ticket_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_at = DateTime(required=True)


@customer_care.event(part_of="SupportTicket")
class TicketAssigned:
    __version__ = 1

    ticket_id = Identifier(required=True)
    agent_id = Identifier(required=True)
