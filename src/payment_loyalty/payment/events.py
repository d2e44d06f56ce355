"""Domain events for payment intents."""

from protean.fields import DateTime, Float, Identifier, String

from payment_loyalty.domain import payment_loyalty


@payment_loyalty.event(part_of="PaymentIntent")
class PaymentIntentStatusChanged:
    __version__ = 1

    intent_id = Identifier(required=True)
    order_id = Identifier()
    from_status = String(required=True)
    to_status = String(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    changed_at = DateTime(required=True)
