"""Provider webhook intake.

Every webhook is stored as a `PaymentWebhookEvent` before it is applied to
its payment intent. Events that cannot be applied are kept with status
``failed`` and the error, so the provider still receives an acknowledgement.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from payment_loyalty.domain import logger, payment_loyalty
from payment_loyalty.payment.intent import PaymentIntent
from shared.clock import utcnow
from shared.status import StatusEnum


class WebhookStatus(StatusEnum):
    PROCESSED = "processed"
    IGNORED = "ignored"
    FAILED = "failed"


# event type -> action applied to the intent
_HANDLERS = {
    "payment.authorized": lambda intent, payload: intent.authorize(),
    "payment.captured": lambda intent, payload: intent.capture(),
    "payment.failed": lambda intent, payload: intent.fail(payload.get("reason") or "Provider reported failure"),
    "payment.cancelled": lambda intent, payload: intent.cancel(),
    "payment.refunded": lambda intent, payload: intent.refund(payload.get("amount"), payload.get("reason")),
}


@payment_loyalty.aggregate
class PaymentWebhookEvent:
    event_type = String(required=True, max_length=100)
    intent_id = Identifier(required=True)
    payload = Text()
    status = String(choices=WebhookStatus, default=WebhookStatus.PROCESSED.value)
    error = String(max_length=1000)
    received_at = DateTime(required=True)


@payment_loyalty.command(part_of="PaymentWebhookEvent")
class ProcessPaymentWebhook:
    event_type = String(required=True, max_length=100)
    intent_id = Identifier(required=True)
    payload_json = Text()


@payment_loyalty.command_handler(part_of=PaymentWebhookEvent)
class PaymentWebhookHandler:
    @handle(ProcessPaymentWebhook)
    def process_webhook(self, command):
        payload = json.loads(command.payload_json) if command.payload_json else {}
        record = PaymentWebhookEvent(
            event_type=command.event_type,
            intent_id=command.intent_id,
            payload=command.payload_json,
            received_at=utcnow(),
        )

        action = _HANDLERS.get(command.event_type)
        if action is None:
            record.status = WebhookStatus.IGNORED.value
        else:
            repo = current_domain.repository_for(PaymentIntent)
            intent = repo.get(command.intent_id)
            try:
                action(intent, payload)
            except ValidationError as exc:
                record.status = WebhookStatus.FAILED.value
                record.error = str(exc.messages)
                logger.warning(
                    "Webhook could not be applied",
                    intent_id=str(command.intent_id),
                    event_type=command.event_type,
                    errors=exc.messages,
                )
            else:
                repo.add(intent)

        current_domain.repository_for(PaymentWebhookEvent).add(record)
        logger.info(
            "Payment webhook received",
            intent_id=str(command.intent_id),
            event_type=command.event_type,
            status=record.status,
        )
        return {"webhook_id": str(record.id), "status": record.status}
