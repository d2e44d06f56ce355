"""Promotion aggregate: a discount rule with a validity window and usage cap."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from payment_loyalty.domain import payment_loyalty
from shared.clock import as_aware, utcnow
from shared.money import round_money
from shared.status import StatusEnum


class PromotionType(StatusEnum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"

    @classmethod
    def field_name(cls):
        return "promo_type"


@payment_loyalty.entity(part_of="Promotion")
class PromotionUsage:
    order_id = Identifier(required=True)
    discount_amount = Float(required=True, min_value=0.0)
    used_at = DateTime(required=True)


@payment_loyalty.aggregate
class Promotion:
    code = String(required=True, max_length=50)
    description = String(max_length=500)
    promo_type = String(required=True, choices=PromotionType)
    value = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)  # caps percentage discounts
    min_order_amount = Float(min_value=0.0)
    starts_at = DateTime()
    ends_at = DateTime()
    usage_limit = Integer(min_value=1)
    is_active = Boolean(default=True)
    usages = HasMany(PromotionUsage)
    created_at = DateTime()

    @invariant.post
    def value_fits_the_type(self):
        if self.promo_type == PromotionType.PERCENTAGE.value and not (0 < (self.value or 0) <= 100):
            raise ValidationError({"value": ["Percentage promotions must be between 0 and 100"]})
        if self.promo_type == PromotionType.FIXED_AMOUNT.value and (self.value or 0) <= 0:
            raise ValidationError({"value": ["Fixed amount promotions must be positive"]})

    @invariant.post
    def window_is_ordered(self):
        if self.starts_at and self.ends_at and as_aware(self.ends_at) <= as_aware(self.starts_at):
            raise ValidationError({"ends_at": ["End date must be after the start date"]})

    @classmethod
    def create(
        cls,
        code,
        promo_type,
        value=0.0,
        min_order_amount=None,
        max_discount=None,
        starts_at=None,
        ends_at=None,
        usage_limit=None,
        description=None,
    ):
        return cls(
            code=code.strip().upper(),
            promo_type=PromotionType.from_string(promo_type).value,
            value=value or 0.0,
            max_discount=max_discount,
            min_order_amount=min_order_amount,
            starts_at=starts_at,
            ends_at=ends_at,
            usage_limit=usage_limit,
            description=description,
            created_at=utcnow(),
        )

    def activate(self):
        self.is_active = True

    def deactivate(self):
        self.is_active = False

    def is_current(self, as_of=None) -> bool:
        now = as_aware(as_of) if as_of else utcnow()
        if not self.is_active:
            return False
        if self.starts_at and now < as_aware(self.starts_at):
            return False
        if self.ends_at and now > as_aware(self.ends_at):
            return False
        return True

    def usage_count(self) -> int:
        return len(self.usages)

    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count() >= self.usage_limit

    def discount_for(self, order_amount: float, shipping_amount: float = 0.0) -> float:
        """Discount this promotion gives on an order, never more than the order amount.

        Free shipping is worth the shipping amount when one is given, else the
        promotion's own value.
        """
        if self.promo_type == PromotionType.PERCENTAGE.value:
            discount = order_amount * self.value / 100
            if self.max_discount:
                discount = min(discount, self.max_discount)
        elif self.promo_type == PromotionType.FIXED_AMOUNT.value:
            discount = self.value
        else:
            discount = shipping_amount or self.value or 0.0
        return round_money(max(min(discount, order_amount), 0.0))

    def eligibility_error(self, order_amount: float, as_of=None) -> str | None:
        """Why this promotion cannot be used on an order of this size, or None."""
        if not self.is_current(as_of):
            return "Promotion is not currently valid"
        if self.is_exhausted():
            return "Promotion usage limit reached"
        if self.min_order_amount and order_amount < self.min_order_amount:
            return "Promotion does not apply to this order"
        return None

    def evaluate(self, order_amount: float, shipping_amount: float = 0.0, as_of=None) -> dict:
        """Return `{valid, discount_amount, error}` for an order of this size."""
        error = self.eligibility_error(order_amount, as_of)
        if error is None:
            discount = self.discount_for(order_amount, shipping_amount)
            if discount > 0:
                return {"valid": True, "discount_amount": discount, "error": None}
            error = "Promotion does not apply to this order"
        return {"valid": False, "discount_amount": 0.0, "error": error}

    def record_usage(self, order_id, discount_amount):
        if not self.is_current():
            raise ValidationError({"code": ["Promotion is not currently valid"]})
        if self.is_exhausted():
            raise ValidationError({"usage_limit": ["Promotion usage limit reached"]})
        if any(str(u.order_id) == str(order_id) for u in self.usages):
            raise ValidationError({"order_id": [f"Promotion already used on order {order_id}"]})
        self.add_usages(PromotionUsage(order_id=order_id, discount_amount=round_money(discount_amount), used_at=utcnow()))
