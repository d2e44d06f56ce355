"""Restock and price-drop reminders for a product variant."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from engagement.domain import engagement, logger
from shared.clock import utcnow
from shared.email import normalize_email
from shared.status import StatusEnum


class ReminderType(StatusEnum):
    RESTOCK = "restock"
    PRICE_DROP = "price_drop"

    @classmethod
    def field_name(cls):
        return "reminder_type"


class ReminderStatus(StatusEnum):
    ACTIVE = "active"
    SENT = "sent"
    UNSUBSCRIBED = "unsubscribed"


class ReminderChannel(StatusEnum):
    EMAIL = "email"
    SMS = "sms"

    @classmethod
    def field_name(cls):
        return "channel"


def _normalize_contact(contact, channel):
    if channel == ReminderChannel.EMAIL:
        return normalize_email(contact, field="contact")
    digits = "".join(ch for ch in (contact or "") if ch.isdigit())
    if len(digits) < 7:
        raise ValidationError({"contact": ["A phone number needs at least 7 digits"]})
    return ("+" if (contact or "").strip().startswith("+") else "") + digits


@engagement.aggregate
class Reminder:
    reminder_type = String(choices=ReminderType, required=True)
    variant_id = Identifier(required=True)
    user_id = Identifier()
    contact = String(required=True, max_length=254)
    channel = String(choices=ReminderChannel, default=ReminderChannel.EMAIL.value)
    status = String(choices=ReminderStatus, default=ReminderStatus.ACTIVE.value)
    opt_in_at = DateTime()
    sent_at = DateTime()

    @classmethod
    def create(cls, reminder_type, variant_id, contact, channel="email", user_id=None):
        channel = ReminderChannel.from_string(channel or "email")
        return cls(
            reminder_type=ReminderType.from_string(reminder_type).value,
            variant_id=variant_id,
            user_id=user_id,
            contact=_normalize_contact(contact, channel),
            channel=channel.value,
            opt_in_at=utcnow(),
        )

    def mark_sent(self):
        if self.status != ReminderStatus.ACTIVE.value:
            raise ValidationError({"status": [f"Cannot send a {self.status} reminder"]})
        self.status = ReminderStatus.SENT.value
        self.sent_at = utcnow()

    def unsubscribe(self):
        self.status = ReminderStatus.UNSUBSCRIBED.value


@engagement.command(part_of=Reminder)
class CreateReminder:
    reminder_type = String(required=True, max_length=20)
    variant_id = Identifier(required=True)
    contact = String(required=True, max_length=254)
    channel = String(max_length=10)
    user_id = Identifier()


@engagement.command(part_of=Reminder)
class MarkReminderSent:
    reminder_id = Identifier(required=True)


@engagement.command(part_of=Reminder)
class UnsubscribeReminder:
    reminder_id = Identifier(required=True)


@engagement.command_handler(part_of=Reminder)
class ReminderHandler:
    @handle(CreateReminder)
    def create(self, command):
        reminder = Reminder.create(
            reminder_type=command.reminder_type,
            variant_id=command.variant_id,
            contact=command.contact,
            channel=command.channel,
            user_id=command.user_id,
        )
        dao = current_domain.repository_for(Reminder)._dao
        duplicates = dao.query.filter(
            variant_id=str(reminder.variant_id),
            contact=reminder.contact,
            reminder_type=reminder.reminder_type,
            status=ReminderStatus.ACTIVE.value,
        ).all().items
        if duplicates:
            return str(duplicates[0].id)

        current_domain.repository_for(Reminder).add(reminder)
        logger.info("Reminder created", reminder_id=str(reminder.id), reminder_type=reminder.reminder_type)
        return str(reminder.id)

    @handle(MarkReminderSent)
    def mark_sent(self, command):
        repo = current_domain.repository_for(Reminder)
        reminder = repo.get(command.reminder_id)
        reminder.mark_sent()
        repo.add(reminder)
        return reminder.status

    @handle(UnsubscribeReminder)
    def unsubscribe(self, command):
        repo = current_domain.repository_for(Reminder)
        reminder = repo.get(command.reminder_id)
        reminder.unsubscribe()
        repo.add(reminder)
        return reminder.status
