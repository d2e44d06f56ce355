"""Read-side queries for payments, gift cards, loyalty, promotions and BNPL."""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from payment_loyalty.bnpl.bnpl import BnplTransaction
from payment_loyalty.gift_card.management import get_by_code_or_id
from payment_loyalty.loyalty.points import find_account
from payment_loyalty.payment.intent import PaymentIntent
from payment_loyalty.promotion.management import find_by_code
from payment_loyalty.promotion.promotion import Promotion
from shared.clock import as_aware
from shared.paging import paginate


def get_payment_intent(intent_id: str) -> dict:
    intent = current_domain.repository_for(PaymentIntent).get(intent_id)
    data = intent.to_dict()
    data["refundable_amount"] = intent.refundable_amount() if intent.status in ("captured", "partially_refunded") else 0.0
    return data


def gift_card_balance(code_or_id: str) -> dict:
    card = get_by_code_or_id(code_or_id)
    return {
        "gift_card_id": str(card.id),
        "code": card.code,
        "balance": card.balance,
        "initial_balance": card.initial_balance,
        "currency": card.currency,
        "status": card.status,
        "expires_at": card.expires_at,
        "expired": card.is_expired(),
    }


def get_loyalty_account(user_id: str) -> dict:
    account = find_account(user_id)
    if account is None:
        raise ObjectNotFoundError(f"No loyalty account for user {user_id}")
    data = account.to_dict()
    data["transactions"] = sorted(data.get("transactions", []), key=lambda t: str(t["created_at"]), reverse=True)
    return data


def list_promotions(active_only: bool = False, page: int = 1, page_size: int = 20) -> dict:
    dao = current_domain.repository_for(Promotion)._dao
    promotions = dao.query.all().items
    if active_only:
        promotions = [p for p in promotions if p.is_current()]
    promotions = sorted(promotions, key=lambda p: as_aware(p.created_at), reverse=True)
    result = paginate(promotions, page, page_size)
    result["items"] = [{**p.to_dict(), "usage_count": p.usage_count()} for p in result["items"]]
    return result


def evaluate_promotion(code: str, order_amount: float, shipping_amount: float = 0.0) -> dict:
    promotion = find_by_code(code)
    if promotion is None:
        return {"valid": False, "discount_amount": 0.0, "error": "Promotion code not found"}
    return promotion.evaluate(order_amount, shipping_amount)


def promotion_terms(code: str, order_amount: float) -> dict:
    """Type and value of a usable promotion, for a cart applying it by code."""
    promotion = find_by_code(code)
    if promotion is None:
        raise ValidationError({"code": ["Promotion code not found"]})
    error = promotion.eligibility_error(order_amount)
    if error:
        raise ValidationError({"code": [error]})
    return {"code": promotion.code, "promo_type": promotion.promo_type, "value": promotion.value}


def get_bnpl_transaction(bnpl_id: str) -> dict:
    return current_domain.repository_for(BnplTransaction).get(bnpl_id).to_dict()
