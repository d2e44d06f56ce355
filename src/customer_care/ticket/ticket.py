"""SupportTicket aggregate with its message thread.

State Machine:
    OPEN → PENDING | IN_PROGRESS | RESOLVED | CLOSED
    PENDING → OPEN | IN_PROGRESS | RESOLVED | CLOSED
    IN_PROGRESS → PENDING | RESOLVED | CLOSED
    RESOLVED → CLOSED
    RESOLVED, CLOSED → OPEN (reopen only)
"""

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, String, Text

from customer_care.domain import customer_care
from customer_care.ticket.events import TicketAssigned, TicketOpened, TicketStatusChanged
from shared.clock import utcnow
from shared.status import StatusEnum, assert_transition


class TicketStatus(StatusEnum):
    OPEN = "open"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(StatusEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def field_name(cls):
        return "priority"


class TicketSource(StatusEnum):
    PHONE = "phone"
    EMAIL = "email"
    CHAT = "chat"
    WEB = "web"

    @classmethod
    def field_name(cls):
        return "source"


class MessageSender(StatusEnum):
    CUSTOMER = "customer"
    AGENT = "agent"

    @classmethod
    def field_name(cls):
        return "sender"


_VALID_TRANSITIONS = {
    TicketStatus.OPEN: {TicketStatus.PENDING, TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED, TicketStatus.CLOSED},
    TicketStatus.PENDING: {TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED, TicketStatus.CLOSED},
    TicketStatus.IN_PROGRESS: {TicketStatus.PENDING, TicketStatus.RESOLVED, TicketStatus.CLOSED},
    TicketStatus.RESOLVED: {TicketStatus.CLOSED},
    TicketStatus.CLOSED: set(),
}


def _clean_subject(subject) -> str:
    if not subject or not subject.strip():
        raise ValidationError({"subject": ["Ticket subject cannot be empty"]})
    return subject.strip()


@customer_care.entity(part_of="SupportTicket")
class TicketMessage:
    sender = String(required=True, choices=MessageSender)
    sender_id = Identifier()
    body = Text(required=True)
    created_at = DateTime(required=True)


@customer_care.aggregate
class SupportTicket:
    user_id = Identifier()
    order_id = Identifier()
    source = String(required=True, choices=TicketSource)
    subject = String(required=True, max_length=255)
    status = String(choices=TicketStatus, default=TicketStatus.OPEN.value)
    priority = String(choices=TicketPriority)
    assigned_agent_id = Identifier()
    messages = HasMany(TicketMessage)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, source, subject, user_id=None, order_id=None, priority=None):
        now = utcnow()
        ticket = cls(
            user_id=user_id,
            order_id=order_id,
            source=TicketSource.from_string(source).value,
            subject=_clean_subject(subject),
            priority=TicketPriority.from_string(priority).value if priority else None,
            created_at=now,
            updated_at=now,
        )
        ticket.raise_(
            TicketOpened(
                ticket_id=str(ticket.id),
                user_id=user_id,
                order_id=order_id,
                source=ticket.source,
                subject=ticket.subject,
                priority=ticket.priority,
                opened_at=now,
            )
        )
        return ticket

    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED.value

    def _assert_not_closed(self, action):
        if self.is_closed():
            raise ValidationError({"status": [f"Cannot {action} a closed ticket"]})

    def _set_status(self, target: TicketStatus):
        previous = self.status
        now = utcnow()
        self.status = target.value
        self.updated_at = now
        self.raise_(
            TicketStatusChanged(ticket_id=str(self.id), from_status=previous, to_status=target.value, changed_at=now)
        )

    def change_status(self, status):
        target = TicketStatus.from_string(status)
        current = TicketStatus.from_string(self.status)
        if current == target:
            return
        assert_transition(_VALID_TRANSITIONS, current, target)
        self._set_status(target)

    def reopen(self):
        if self.status not in (TicketStatus.RESOLVED.value, TicketStatus.CLOSED.value):
            raise ValidationError({"status": ["Only resolved or closed tickets can be reopened"]})
        self._set_status(TicketStatus.OPEN)

    def change_priority(self, priority):
        self._assert_not_closed("change the priority of")
        self.priority = TicketPriority.from_string(priority).value
        self.updated_at = utcnow()

    def change_subject(self, subject):
        self._assert_not_closed("change the subject of")
        self.subject = _clean_subject(subject)
        self.updated_at = utcnow()

    def assign(self, agent_id):
        self._assert_not_closed("assign")
        self.assigned_agent_id = agent_id
        if self.status == TicketStatus.OPEN.value:
            self._set_status(TicketStatus.IN_PROGRESS)
        self.updated_at = utcnow()
        self.raise_(TicketAssigned(ticket_id=str(self.id), agent_id=str(agent_id)))

    def add_message(self, sender, body, sender_id=None):
        self._assert_not_closed("add messages to")
        if not body or not body.strip():
            raise ValidationError({"body": ["Message body cannot be empty"]})
        message = TicketMessage(
            sender=MessageSender.from_string(sender).value,
            sender_id=sender_id,
            body=body.strip(),
            created_at=utcnow(),
        )
        self.add_messages(message)
        self.updated_at = message.created_at
        return message
