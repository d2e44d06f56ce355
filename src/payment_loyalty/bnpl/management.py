"""BNPL commands."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from payment_loyalty.bnpl.bnpl import BnplTransaction
from payment_loyalty.domain import logger, payment_loyalty
from payment_loyalty.payment.intent import PaymentIntent
from shared.settings import get_settings


@payment_loyalty.command(part_of="BnplTransaction")
class CreateBnplTransaction:
    intent_id = Identifier(required=True)
    provider = String(required=True, max_length=20)
    installments = Integer()
    interval_days = Integer()


@payment_loyalty.command(part_of="BnplTransaction")
class UpdateBnplStatus:
    bnpl_id = Identifier(required=True)
    action = String(required=True, max_length=20)


@payment_loyalty.command_handler(part_of=BnplTransaction)
class BnplHandler:
    @handle(CreateBnplTransaction)
    def create(self, command):
        try:
            intent = current_domain.repository_for(PaymentIntent).get(command.intent_id)
        except ObjectNotFoundError:
            raise ValidationError({"intent_id": [f"Payment intent {command.intent_id} not found"]}) from None

        settings = get_settings()
        bnpl = BnplTransaction.create(
            intent_id=command.intent_id,
            provider=command.provider,
            total=intent.amount,
            installments=command.installments or settings.BNPL_DEFAULT_INSTALLMENTS,
            interval_days=command.interval_days or settings.BNPL_INTERVAL_DAYS,
        )
        current_domain.repository_for(BnplTransaction).add(bnpl)
        logger.info("BNPL transaction created", bnpl_id=str(bnpl.id), intent_id=str(command.intent_id))
        return str(bnpl.id)

    @handle(UpdateBnplStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(BnplTransaction)
        bnpl = repo.get(command.bnpl_id)
        bnpl.apply(command.action)
        repo.add(bnpl)
        return bnpl.status
