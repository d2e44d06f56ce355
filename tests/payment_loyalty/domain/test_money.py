import pytest
from payment_loyalty.money import Money
from protean.exceptions import ValidationError


class TestMoney:
    def test_rounds_half_up_to_cents(self):
        assert Money.create(10.005).amount == 10.01
        assert Money.create(2.344).amount == 2.34

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            Money.create(-1)

    def test_unsupported_currency_rejected(self):
        with pytest.raises(ValidationError):
            Money.create(5, "XYZ")

    def test_add_and_subtract(self):
        total = Money.create(10).add(Money.create(5.5))
        assert total.amount == 15.5
        assert total.subtract(Money.create(0.5)).amount == 15.0

    def test_subtract_below_zero_fails(self):
        with pytest.raises(ValidationError) as exc:
            Money.create(1).subtract(Money.create(2))
        assert "amount" in exc.value.messages

    def test_currency_mismatch_fails(self):
        with pytest.raises(ValidationError) as exc:
            Money.create(1, "USD").add(Money.create(1, "EUR"))
        assert "currency" in exc.value.messages

    def test_multiply_and_compare(self):
        price = Money.create(19.99)
        assert price.multiply(3).amount == 59.97
        assert price.multiply(3).is_greater_than(price)
        assert Money.zero().is_zero()

    def test_str(self):
        assert str(Money.create(3, "EUR")) == "3.00 EUR"
