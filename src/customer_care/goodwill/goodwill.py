"""Goodwill gestures granted to customers after a service failure."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from customer_care.domain import customer_care, logger
from shared.clock import utcnow
from shared.money import SUPPORTED_CURRENCIES, round_money
from shared.status import StatusEnum


class GoodwillType(StatusEnum):
    REFUND = "refund"
    DISCOUNT = "discount"
    CREDIT = "credit"
    GIFT = "gift"

    @classmethod
    def field_name(cls):
        return "goodwill_type"


@customer_care.aggregate
class GoodwillRecord:
    user_id = Identifier()
    order_id = Identifier()
    ticket_id = Identifier()
    goodwill_type = String(required=True, choices=GoodwillType)
    value = Float(required=True)
    currency = String(max_length=3, default="USD")
    reason = Text()
    created_at = DateTime()

    @classmethod
    def create(cls, goodwill_type, value, user_id=None, order_id=None, ticket_id=None, reason=None, currency="USD"):
        if value is None or round_money(value) <= 0:
            raise ValidationError({"value": ["Goodwill value must be greater than zero"]})
        currency = (currency or "USD").upper()
        if currency not in SUPPORTED_CURRENCIES:
            raise ValidationError({"currency": [f"Unsupported currency: {currency}"]})
        return cls(
            user_id=user_id,
            order_id=order_id,
            ticket_id=ticket_id,
            goodwill_type=GoodwillType.from_string(goodwill_type).value,
            value=round_money(value),
            currency=currency,
            reason=reason,
            created_at=utcnow(),
        )


@customer_care.command(part_of=GoodwillRecord)
class CreateGoodwillRecord:
    goodwill_type = String(required=True, max_length=20)
    value = Float(required=True)
    currency = String(max_length=3, default="USD")
    user_id = Identifier()
    order_id = Identifier()
    ticket_id = Identifier()
    reason = Text()


@customer_care.command_handler(part_of=GoodwillRecord)
class GoodwillHandler:
    @handle(CreateGoodwillRecord)
    def create(self, command):
        record = GoodwillRecord.create(
            goodwill_type=command.goodwill_type,
            value=command.value,
            user_id=command.user_id,
            order_id=command.order_id,
            ticket_id=command.ticket_id,
            reason=command.reason,
            currency=command.currency,
        )
        current_domain.repository_for(GoodwillRecord).add(record)
        logger.info("Goodwill granted", record_id=str(record.id), goodwill_type=record.goodwill_type, value=record.value)
        return str(record.id)
