"""Payment intent commands: create, authorize, capture, fail, refund and cancel."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from payment_loyalty.domain import logger, payment_loyalty
from payment_loyalty.payment.intent import PaymentIntent


@payment_loyalty.command(part_of="PaymentIntent")
class CreatePaymentIntent:
    order_id = Identifier()
    amount = Float(required=True)
    currency = String(max_length=3, default="USD")
    provider = String(required=True, max_length=20)
    idempotency_key = String(required=True, max_length=255)


@payment_loyalty.command(part_of="PaymentIntent")
class AuthorizePayment:
    intent_id = Identifier(required=True)


@payment_loyalty.command(part_of="PaymentIntent")
class CapturePayment:
    intent_id = Identifier(required=True)


@payment_loyalty.command(part_of="PaymentIntent")
class FailPayment:
    intent_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@payment_loyalty.command(part_of="PaymentIntent")
class RefundPayment:
    intent_id = Identifier(required=True)
    amount = Float()
    reason = String(max_length=500)


@payment_loyalty.command(part_of="PaymentIntent")
class CancelPayment:
    intent_id = Identifier(required=True)


def find_by_idempotency_key(key):
    dao = current_domain.repository_for(PaymentIntent)._dao
    intents = dao.query.filter(idempotency_key=key).all().items
    return intents[0] if intents else None


@payment_loyalty.command_handler(part_of=PaymentIntent)
class PaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_intent(self, command):
        """Create an intent, or return the one already created with this key."""
        existing = find_by_idempotency_key(command.idempotency_key)
        if existing:
            logger.info("Idempotent payment intent replay", intent_id=str(existing.id))
            return {"intent_id": str(existing.id), "client_secret": existing.client_secret}

        intent = PaymentIntent.create(
            amount=command.amount,
            currency=command.currency,
            provider=command.provider,
            idempotency_key=command.idempotency_key,
            order_id=command.order_id,
        )
        current_domain.repository_for(PaymentIntent).add(intent)
        logger.info(
            "Payment intent created",
            intent_id=str(intent.id),
            order_id=str(command.order_id) if command.order_id else None,
            amount=intent.amount.amount,
            provider=intent.provider,
        )
        return {"intent_id": str(intent.id), "client_secret": intent.client_secret}

    def _apply(self, intent_id, action):
        repo = current_domain.repository_for(PaymentIntent)
        intent = repo.get(intent_id)
        previous = intent.status
        result = action(intent)
        repo.add(intent)
        logger.info(
            "Payment intent status changed",
            intent_id=str(intent_id),
            from_status=previous,
            to_status=intent.status,
        )
        return result

    @handle(AuthorizePayment)
    def authorize(self, command):
        return self._apply(command.intent_id, lambda i: i.authorize() or i.status)

    @handle(CapturePayment)
    def capture(self, command):
        return self._apply(command.intent_id, lambda i: i.capture() or i.status)

    @handle(FailPayment)
    def fail(self, command):
        return self._apply(command.intent_id, lambda i: i.fail(command.reason) or i.status)

    @handle(RefundPayment)
    def refund(self, command):
        return self._apply(command.intent_id, lambda i: i.refund(command.amount, command.reason))

    @handle(CancelPayment)
    def cancel(self, command):
        return self._apply(command.intent_id, lambda i: i.cancel() or i.status)
