"""Gift card commands and balance lookups."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from payment_loyalty.domain import logger, payment_loyalty
from payment_loyalty.gift_card.gift_card import GiftCard


@payment_loyalty.command(part_of="GiftCard")
class IssueGiftCard:
    amount = Float(required=True)
    currency = String(max_length=3, default="USD")
    code = String(max_length=50)
    expires_at = DateTime()
    recipient_email = String(max_length=254)
    recipient_name = String(max_length=200)
    message = Text()


@payment_loyalty.command(part_of="GiftCard")
class RedeemGiftCard:
    gift_card_id = Identifier(required=True)
    amount = Float(required=True)
    order_id = Identifier()


@payment_loyalty.command(part_of="GiftCard")
class RefundGiftCard:
    gift_card_id = Identifier(required=True)
    amount = Float(required=True)
    order_id = Identifier()


@payment_loyalty.command(part_of="GiftCard")
class CancelGiftCard:
    gift_card_id = Identifier(required=True)


def find_by_code(code):
    dao = current_domain.repository_for(GiftCard)._dao
    cards = dao.query.filter(code=(code or "").strip().upper()).all().items
    return cards[0] if cards else None


def get_by_code_or_id(code_or_id):
    card = find_by_code(code_or_id)
    if card is not None:
        return card
    try:
        return current_domain.repository_for(GiftCard).get(code_or_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError(f"Gift card {code_or_id} not found") from None


@payment_loyalty.command_handler(part_of=GiftCard)
class GiftCardHandler:
    @handle(IssueGiftCard)
    def issue(self, command):
        if command.code and find_by_code(command.code):
            raise ValidationError({"code": [f"Gift card code {command.code.upper()} already exists"]})

        card = GiftCard.issue(
            amount=command.amount,
            currency=command.currency,
            code=command.code,
            expires_at=command.expires_at,
            recipient_email=command.recipient_email,
            recipient_name=command.recipient_name,
            message=command.message,
        )
        current_domain.repository_for(GiftCard).add(card)
        logger.info("Gift card issued", gift_card_id=str(card.id), amount=card.initial_balance)
        return {"gift_card_id": str(card.id), "code": card.code}

    @handle(RedeemGiftCard)
    def redeem(self, command):
        repo = current_domain.repository_for(GiftCard)
        card = repo.get(command.gift_card_id)
        balance = card.redeem(command.amount, command.order_id)
        repo.add(card)
        logger.info("Gift card redeemed", gift_card_id=str(card.id), amount=command.amount, balance=balance)
        return balance

    @handle(RefundGiftCard)
    def refund(self, command):
        repo = current_domain.repository_for(GiftCard)
        card = repo.get(command.gift_card_id)
        balance = card.refund(command.amount, command.order_id)
        repo.add(card)
        return balance

    @handle(CancelGiftCard)
    def cancel(self, command):
        repo = current_domain.repository_for(GiftCard)
        card = repo.get(command.gift_card_id)
        card.cancel()
        repo.add(card)
