"""Domain tests for Promotion and BnplTransaction."""

from datetime import timedelta
from uuid import uuid4

import pytest
from payment_loyalty.bnpl.bnpl import BnplStatus, BnplTransaction
from payment_loyalty.money import Money
from payment_loyalty.promotion.promotion import Promotion
from protean.exceptions import ValidationError
from shared.clock import utcnow


class TestPromotion:
    def test_percentage_discount(self):
        promo = Promotion.create(code="save10", promo_type="percentage", value=10)
        assert promo.code == "SAVE10"
        assert promo.evaluate(80.0) == {"valid": True, "discount_amount": 8.0, "error": None}

    def test_fixed_discount_capped_at_order(self):
        promo = Promotion.create(code="FLAT50", promo_type="fixed_amount", value=50)
        assert promo.evaluate(30.0)["discount_amount"] == 30.0

    def test_free_shipping_discounts_shipping(self):
        promo = Promotion.create(code="SHIPFREE", promo_type="free_shipping")
        assert promo.evaluate(40.0, shipping_amount=7.5)["discount_amount"] == 7.5

    def test_shipping_does_not_raise_the_cap(self):
        promo = Promotion.create(code="FLAT50", promo_type="fixed_amount", value=50)
        assert promo.evaluate(30.0, shipping_amount=10.0)["discount_amount"] == 30.0

    def test_percentage_capped_by_max_discount(self):
        promo = Promotion.create(code="HALF", promo_type="percentage", value=50, max_discount=25)
        assert promo.evaluate(200.0)["discount_amount"] == 25.0
        assert promo.evaluate(30.0)["discount_amount"] == 15.0

    def test_zero_discount_is_not_valid(self):
        promo = Promotion.create(code="SHIPFREE", promo_type="free_shipping")
        assert promo.evaluate(40.0) == {
            "valid": False,
            "discount_amount": 0.0,
            "error": "Promotion does not apply to this order",
        }

    def test_empty_order_gets_no_discount(self):
        promo = Promotion.create(code="SAVE10", promo_type="percentage", value=10)
        assert promo.evaluate(0.0)["valid"] is False

    def test_percentage_over_100_rejected(self):
        with pytest.raises(ValidationError):
            Promotion.create(code="BAD", promo_type="percentage", value=120)

    def test_window_must_be_ordered(self):
        now = utcnow()
        with pytest.raises(ValidationError):
            Promotion.create(code="W", promo_type="fixed_amount", value=5, starts_at=now, ends_at=now - timedelta(days=1))

    def test_minimum_order_amount(self):
        promo = Promotion.create(code="MIN", promo_type="fixed_amount", value=5, min_order_amount=50)
        assert promo.evaluate(49.99)["error"] == "Promotion does not apply to this order"

    def test_inactive_or_future_promotion_invalid(self):
        promo = Promotion.create(code="LATER", promo_type="fixed_amount", value=5, starts_at=utcnow() + timedelta(days=1))
        assert promo.evaluate(20.0)["error"] == "Promotion is not currently valid"

        promo = Promotion.create(code="OFF", promo_type="fixed_amount", value=5)
        promo.deactivate()
        assert promo.evaluate(20.0)["valid"] is False

    def test_usage_limit(self):
        promo = Promotion.create(code="ONCE", promo_type="fixed_amount", value=5, usage_limit=1)
        promo.record_usage(str(uuid4()), 5.0)
        assert promo.evaluate(20.0)["error"] == "Promotion usage limit reached"
        with pytest.raises(ValidationError):
            promo.record_usage(str(uuid4()), 5.0)


class TestBnpl:
    def _bnpl(self):
        return BnplTransaction.create(str(uuid4()), "Koko", Money.create(100.0), installments=4, interval_days=14)

    def test_plan_splits_total(self):
        bnpl = self._bnpl()
        assert bnpl.provider == "koko"
        assert bnpl.plan.installments == 4
        assert bnpl.plan.installment_amount == 25.0
        assert bnpl.status == BnplStatus.PENDING.value

    def test_happy_path(self):
        bnpl = self._bnpl()
        for action in ("approve", "activate", "complete"):
            bnpl.apply(action)
        assert bnpl.status == BnplStatus.COMPLETED.value

    def test_cannot_activate_pending(self):
        with pytest.raises(ValidationError) as exc:
            self._bnpl().apply("activate")
        assert "Cannot transition from pending to active" in exc.value.messages["status"][0]

    def test_unknown_action(self):
        with pytest.raises(ValidationError):
            self._bnpl().apply("pause")
