"""Outbound notifications recorded for later delivery.

State Machine:
    SCHEDULED → SENT | FAILED | CANCELLED
    FAILED → SCHEDULED (retry)
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from engagement.domain import engagement, logger
from shared.clock import is_past, utcnow
from shared.status import StatusEnum, assert_transition


class NotificationStatus(StatusEnum):
    SCHEDULED = "scheduled"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class NotificationChannel(StatusEnum):
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"

    @classmethod
    def field_name(cls):
        return "channel"


_VALID_TRANSITIONS = {
    NotificationStatus.SCHEDULED: {NotificationStatus.SENT, NotificationStatus.FAILED, NotificationStatus.CANCELLED},
    NotificationStatus.FAILED: {NotificationStatus.SCHEDULED},
    NotificationStatus.SENT: set(),
    NotificationStatus.CANCELLED: set(),
}


@engagement.aggregate
class Notification:
    notification_type = String(required=True, max_length=50)
    channel = String(choices=NotificationChannel, required=True)
    recipient = String(max_length=254)
    user_id = Identifier()
    template_id = String(max_length=100)
    payload = Text()  # JSON object
    status = String(choices=NotificationStatus, default=NotificationStatus.SCHEDULED.value)
    scheduled_at = DateTime()
    sent_at = DateTime()
    attempts = Integer(default=0)
    error = String(max_length=1000)
    created_at = DateTime()

    @classmethod
    def schedule(cls, notification_type, channel, recipient=None, user_id=None, template_id=None, payload=None, scheduled_at=None):
        if scheduled_at is not None and is_past(scheduled_at):
            raise ValidationError({"scheduled_at": ["Scheduled time must be in the future"]})
        if not recipient and not user_id:
            raise ValidationError({"recipient": ["A recipient or user is required"]})
        now = utcnow()
        return cls(
            notification_type=notification_type.strip().lower(),
            channel=NotificationChannel.from_string(channel).value,
            recipient=recipient,
            user_id=user_id,
            template_id=template_id,
            payload=json.dumps(payload or {}),
            scheduled_at=scheduled_at or now,
            created_at=now,
        )

    def payload_data(self) -> dict:
        return json.loads(self.payload) if self.payload else {}

    def _change_status(self, target):
        assert_transition(_VALID_TRANSITIONS, NotificationStatus.from_string(self.status), target)
        self.status = target.value

    def mark_sent(self):
        self._change_status(NotificationStatus.SENT)
        self.attempts += 1
        self.sent_at = utcnow()
        self.error = None

    def mark_failed(self, error):
        self._change_status(NotificationStatus.FAILED)
        self.attempts += 1
        self.error = (error or "Unknown error")[:1000]

    def cancel(self):
        self._change_status(NotificationStatus.CANCELLED)

    def retry(self, scheduled_at=None):
        self._change_status(NotificationStatus.SCHEDULED)
        self.scheduled_at = scheduled_at or utcnow()

    def is_due(self, as_of=None) -> bool:
        return self.status == NotificationStatus.SCHEDULED.value and is_past(self.scheduled_at, as_of)


def _load_payload(raw):
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ValidationError({"payload": [f"Payload is not valid JSON: {exc}"]}) from exc
    if not isinstance(payload, dict):
        raise ValidationError({"payload": ["Payload must be a JSON object"]})
    return payload


@engagement.command(part_of=Notification)
class ScheduleNotification:
    notification_type = String(required=True, max_length=50)
    channel = String(required=True, max_length=10)
    recipient = String(max_length=254)
    user_id = Identifier()
    template_id = String(max_length=100)
    payload_json = Text()  # JSON object
    scheduled_at = DateTime()


@engagement.command(part_of=Notification)
class MarkNotificationSent:
    notification_id = Identifier(required=True)


@engagement.command(part_of=Notification)
class MarkNotificationFailed:
    notification_id = Identifier(required=True)
    error = String(max_length=1000)


@engagement.command(part_of=Notification)
class CancelNotification:
    notification_id = Identifier(required=True)


@engagement.command(part_of=Notification)
class RetryNotification:
    notification_id = Identifier(required=True)
    scheduled_at = DateTime()


@engagement.command_handler(part_of=Notification)
class NotificationHandler:
    @handle(ScheduleNotification)
    def schedule(self, command):
        notification = Notification.schedule(
            notification_type=command.notification_type,
            channel=command.channel,
            recipient=command.recipient,
            user_id=command.user_id,
            template_id=command.template_id,
            payload=_load_payload(command.payload_json),
            scheduled_at=command.scheduled_at,
        )
        current_domain.repository_for(Notification).add(notification)
        logger.info(
            "Notification scheduled",
            notification_id=str(notification.id),
            notification_type=notification.notification_type,
            channel=notification.channel,
        )
        return str(notification.id)

    def _apply(self, notification_id, change):
        repo = current_domain.repository_for(Notification)
        notification = repo.get(notification_id)
        change(notification)
        repo.add(notification)
        return notification.status

    @handle(MarkNotificationSent)
    def mark_sent(self, command):
        return self._apply(command.notification_id, lambda n: n.mark_sent())

    @handle(MarkNotificationFailed)
    def mark_failed(self, command):
        status = self._apply(command.notification_id, lambda n: n.mark_failed(command.error))
        logger.warning("Notification failed", notification_id=str(command.notification_id), error=command.error)
        return status

    @handle(CancelNotification)
    def cancel(self, command):
        return self._apply(command.notification_id, lambda n: n.cancel())

    @handle(RetryNotification)
    def retry(self, command):
        return self._apply(command.notification_id, lambda n: n.retry(command.scheduled_at))
