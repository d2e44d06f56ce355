"""Support ticket commands."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from customer_care.agent.agent import SupportAgent
from customer_care.domain import customer_care, logger
from customer_care.ticket.ticket import SupportTicket


@customer_care.command(part_of="SupportTicket")
class CreateSupportTicket:
    source = String(required=True, max_length=20)
    subject = String(required=True, max_length=255)
    user_id = Identifier()
    order_id = Identifier()
    priority = String(max_length=20)
    message = Text()


@customer_care.command(part_of="SupportTicket")
class UpdateTicketStatus:
    ticket_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@customer_care.command(part_of="SupportTicket")
class UpdateTicketPriority:
    ticket_id = Identifier(required=True)
    priority = String(required=True, max_length=20)


@customer_care.command(part_of="SupportTicket")
class UpdateTicketSubject:
    ticket_id = Identifier(required=True)
    subject = String(required=True, max_length=255)


@customer_care.command(part_of="SupportTicket")
class AssignTicket:
    ticket_id = Identifier(required=True)
    agent_id = Identifier(required=True)


@customer_care.command(part_of="SupportTicket")
class AddTicketMessage:
    ticket_id = Identifier(required=True)
    sender = String(required=True, max_length=20)
    body = Text(required=True)
    sender_id = Identifier()


@customer_care.command(part_of="SupportTicket")
class ReopenTicket:
    ticket_id = Identifier(required=True)


@customer_care.command_handler(part_of=SupportTicket)
class SupportTicketHandler:
    def _mutate(self, ticket_id, change):
        repo = current_domain.repository_for(SupportTicket)
        ticket = repo.get(ticket_id)
        result = change(ticket)
        repo.add(ticket)
        return result

    @handle(CreateSupportTicket)
    def create(self, command):
        ticket = SupportTicket.open(
            source=command.source,
            subject=command.subject,
            user_id=command.user_id,
            order_id=command.order_id,
            priority=command.priority,
        )
        if command.message:
            ticket.add_message("customer", command.message, sender_id=command.user_id)
        current_domain.repository_for(SupportTicket).add(ticket)
        logger.info("Support ticket opened", ticket_id=str(ticket.id), source=ticket.source)
        return str(ticket.id)

    @handle(UpdateTicketStatus)
    def update_status(self, command):
        status = self._mutate(command.ticket_id, lambda t: t.change_status(command.status) or t.status)
        logger.info("Ticket status updated", ticket_id=str(command.ticket_id), status=status)
        return status

    @handle(UpdateTicketPriority)
    def update_priority(self, command):
        self._mutate(command.ticket_id, lambda t: t.change_priority(command.priority))

    @handle(UpdateTicketSubject)
    def update_subject(self, command):
        self._mutate(command.ticket_id, lambda t: t.change_subject(command.subject))

    @handle(AssignTicket)
    def assign(self, command):
        agent = current_domain.repository_for(SupportAgent).get(command.agent_id)
        agent.assert_available()
        return self._mutate(command.ticket_id, lambda t: t.assign(agent.id) or t.status)

    @handle(AddTicketMessage)
    def add_message(self, command):
        message = self._mutate(command.ticket_id, lambda t: t.add_message(command.sender, command.body, command.sender_id))
        return str(message.id)

    @handle(ReopenTicket)
    def reopen(self, command):
        self._mutate(command.ticket_id, lambda t: t.reopen())
        logger.info("Ticket reopened", ticket_id=str(command.ticket_id))
