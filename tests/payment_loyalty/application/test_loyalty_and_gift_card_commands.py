"""Application tests for gift cards, loyalty points and promotions."""

from uuid import uuid4

import pytest
from payment_loyalty import queries
from payment_loyalty.gift_card.management import IssueGiftCard, RedeemGiftCard, RefundGiftCard
from payment_loyalty.loyalty.points import AwardPoints, AwardPointsForOrder, EnrollInLoyalty, RedeemPoints
from payment_loyalty.promotion.management import CreatePromotion, DeactivatePromotion, RecordPromotionUsage
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestGiftCardCommands:
    def test_issue_redeem_and_refund(self):
        issued = _process(IssueGiftCard(amount=75.0, code="holiday-75"))
        assert issued["code"] == "HOLIDAY-75"

        card_id = issued["gift_card_id"]
        assert _process(RedeemGiftCard(gift_card_id=card_id, amount=75.0)) == 0
        assert queries.gift_card_balance("holiday-75")["status"] == "redeemed"

        assert _process(RefundGiftCard(gift_card_id=card_id, amount=25.0)) == 25.0
        assert queries.gift_card_balance(card_id)["status"] == "active"

    def test_duplicate_code_rejected(self):
        _process(IssueGiftCard(amount=10.0, code="DUPE"))
        with pytest.raises(ValidationError):
            _process(IssueGiftCard(amount=10.0, code="dupe"))

    def test_unknown_card(self):
        with pytest.raises(ObjectNotFoundError):
            queries.gift_card_balance("NOPE")


class TestLoyaltyCommands:
    def test_enroll_once(self):
        user_id = str(uuid4())
        _process(EnrollInLoyalty(user_id=user_id))
        with pytest.raises(ValidationError):
            _process(EnrollInLoyalty(user_id=user_id))

    def test_award_auto_enrolls(self):
        user_id = str(uuid4())
        assert _process(AwardPoints(user_id=user_id, points=50)) == 50
        assert queries.get_loyalty_account(user_id)["points_balance"] == 50

    def test_order_points_are_floored(self):
        user_id = str(uuid4())
        balance = _process(AwardPointsForOrder(user_id=user_id, order_id=str(uuid4()), order_total=99.99))
        assert balance == 99

    def test_redeem_more_than_balance_fails(self):
        user_id = str(uuid4())
        _process(AwardPoints(user_id=user_id, points=10))
        with pytest.raises(ValidationError):
            _process(RedeemPoints(user_id=user_id, points=20))


class TestPromotionCommands:
    def test_evaluate_by_code(self):
        _process(CreatePromotion(code="spring20", promo_type="percentage", value=20))
        result = queries.evaluate_promotion("SPRING20", order_amount=50.0)
        assert result == {"valid": True, "discount_amount": 10.0, "error": None}

    def test_unknown_code(self):
        assert queries.evaluate_promotion("MISSING", order_amount=50.0)["error"] == "Promotion code not found"

    def test_promotion_terms_for_a_cart(self):
        _process(CreatePromotion(code="half", promo_type="percentage", value=50, max_discount=20))
        assert queries.promotion_terms(" Half ", order_amount=10.0) == {
            "code": "HALF",
            "promo_type": "percentage",
            "value": 50.0,
        }

    def test_promotion_terms_reject_unusable_codes(self):
        _process(CreatePromotion(code="BIGSPEND", promo_type="fixed_amount", value=10, min_order_amount=100))
        with pytest.raises(ValidationError) as exc:
            queries.promotion_terms("BIGSPEND", order_amount=40.0)
        assert exc.value.messages["code"] == ["Promotion does not apply to this order"]

        with pytest.raises(ValidationError) as exc:
            queries.promotion_terms("NOPE", order_amount=40.0)
        assert exc.value.messages["code"] == ["Promotion code not found"]

    def test_deactivated_promotion_is_invalid(self):
        promotion_id = _process(CreatePromotion(code="PAUSED", promo_type="fixed_amount", value=5))
        _process(DeactivatePromotion(promotion_id=promotion_id))
        assert queries.evaluate_promotion("paused", order_amount=50.0)["valid"] is False

    def test_usage_limit_enforced(self):
        promotion_id = _process(CreatePromotion(code="LIMIT1", promo_type="fixed_amount", value=5, usage_limit=1))
        assert _process(RecordPromotionUsage(promotion_id=promotion_id, order_id=str(uuid4()), discount_amount=5)) == 1
        with pytest.raises(ValidationError):
            _process(RecordPromotionUsage(promotion_id=promotion_id, order_id=str(uuid4()), discount_amount=5))
