"""ChatSession aggregate: a live conversation between a customer and an agent.

State Machine:
    WAITING → ACTIVE | ENDED
    ACTIVE → WAITING | ENDED
"""

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, String, Text

from customer_care.domain import customer_care
from customer_care.ticket.ticket import TicketPriority
from shared.clock import as_aware, utcnow
from shared.status import StatusEnum, assert_transition


class ChatStatus(StatusEnum):
    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"


class ChatSenderType(StatusEnum):
    CUSTOMER = "customer"
    AGENT = "agent"
    BOT = "bot"

    @classmethod
    def field_name(cls):
        return "sender_type"


_VALID_TRANSITIONS = {
    ChatStatus.WAITING: {ChatStatus.ACTIVE, ChatStatus.ENDED},
    ChatStatus.ACTIVE: {ChatStatus.WAITING, ChatStatus.ENDED},
    ChatStatus.ENDED: set(),
}


@customer_care.entity(part_of="ChatSession")
class ChatMessage:
    sender_id = Identifier()
    sender_type = String(required=True, choices=ChatSenderType)
    body = Text(required=True)
    created_at = DateTime(required=True)


@customer_care.aggregate
class ChatSession:
    user_id = Identifier()
    agent_id = Identifier()
    topic = String(max_length=255)
    priority = String(choices=TicketPriority)
    status = String(choices=ChatStatus, default=ChatStatus.WAITING.value)
    messages = HasMany(ChatMessage)
    started_at = DateTime()
    ended_at = DateTime()

    @classmethod
    def start(cls, user_id=None, topic=None, priority=None):
        return cls(
            user_id=user_id,
            topic=topic.strip() if topic else None,
            priority=TicketPriority.from_string(priority).value if priority else None,
            started_at=utcnow(),
        )

    def is_ended(self) -> bool:
        return self.status == ChatStatus.ENDED.value

    def _assert_open(self, action):
        if self.is_ended():
            raise ValidationError({"status": [f"Cannot {action} an ended session"]})

    def change_status(self, status):
        self._assert_open("update the status of")
        target = ChatStatus.from_string(status)
        current = ChatStatus.from_string(self.status)
        if current == target:
            return
        assert_transition(_VALID_TRANSITIONS, current, target)
        self.status = target.value
        if target == ChatStatus.ENDED:
            self.ended_at = utcnow()

    def assign_agent(self, agent_id):
        self._assert_open("assign an agent to")
        if not agent_id:
            raise ValidationError({"agent_id": ["Agent ID cannot be empty"]})
        self.agent_id = agent_id
        if self.status == ChatStatus.WAITING.value:
            self.status = ChatStatus.ACTIVE.value

    def add_message(self, sender_type, body, sender_id=None):
        self._assert_open("add messages to")
        if not body or not body.strip():
            raise ValidationError({"body": ["Message body cannot be empty"]})
        message = ChatMessage(
            sender_id=sender_id,
            sender_type=ChatSenderType.from_string(sender_type).value,
            body=body.strip(),
            created_at=utcnow(),
        )
        self.add_messages(message)
        return message

    def end(self):
        if self.is_ended():
            raise ValidationError({"status": ["Session is already ended"]})
        self.change_status(ChatStatus.ENDED)

    def duration_seconds(self) -> int | None:
        if not self.ended_at:
            return None
        return int((as_aware(self.ended_at) - as_aware(self.started_at)).total_seconds())
