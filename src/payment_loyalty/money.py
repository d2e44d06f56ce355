"""Money value object shared by every aggregate in payments and loyalty."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, String

from payment_loyalty.domain import payment_loyalty
from shared.money import SUPPORTED_CURRENCIES, round_money


@payment_loyalty.value_object
class Money:
    """A non-negative amount in a supported currency, rounded half-up to cents.

    Build instances with `Money.create`, which rounds before validating;
    arithmetic returns new instances and refuses to mix currencies.
    """

    amount: Float(required=True)
    currency: String(required=True, max_length=3)

    @invariant.post
    def amount_is_not_negative(self):
        if self.amount is not None and self.amount < 0:
            raise ValidationError({"amount": ["Amount cannot be negative"]})

    @invariant.post
    def currency_is_supported(self):
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValidationError({"currency": [f"Unsupported currency: {self.currency}"]})

    @classmethod
    def create(cls, amount, currency="USD") -> "Money":
        if amount is None:
            raise ValidationError({"amount": ["Amount is required"]})
        if amount < 0:
            raise ValidationError({"amount": ["Amount cannot be negative"]})
        return cls(amount=round_money(amount), currency=(currency or "USD").upper())

    @classmethod
    def zero(cls, currency="USD") -> "Money":
        return cls.create(0, currency)

    def _check_currency(self, other: "Money"):
        if self.currency != other.currency:
            raise ValidationError({"currency": [f"Currency mismatch: {self.currency} vs {other.currency}"]})

    def add(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money.create(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_currency(other)
        result = round_money(self.amount - other.amount)
        if result < 0:
            raise ValidationError({"amount": ["Resulting amount cannot be negative"]})
        return Money.create(result, self.currency)

    def multiply(self, factor: float) -> "Money":
        if factor < 0:
            raise ValidationError({"factor": ["Factor cannot be negative"]})
        return Money.create(self.amount * factor, self.currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_greater_than(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount > other.amount

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"
