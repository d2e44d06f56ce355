"""LoyaltyAccount aggregate.

Tiers are derived from lifetime points and never go down when points are
redeemed.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from payment_loyalty.domain import payment_loyalty
from shared.clock import utcnow
from shared.status import StatusEnum


class LoyaltyTier(StatusEnum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"

    @classmethod
    def field_name(cls):
        return "tier"


class PointsReason(StatusEnum):
    EARN = "earn"
    REDEEM = "redeem"
    ADJUST = "adjust"
    EXPIRE = "expire"

    @classmethod
    def field_name(cls):
        return "reason"


# Ordered highest first
TIER_THRESHOLDS = [
    (LoyaltyTier.PLATINUM, 10000),
    (LoyaltyTier.GOLD, 5000),
    (LoyaltyTier.SILVER, 1000),
    (LoyaltyTier.BRONZE, 0),
]


def tier_for(lifetime_points: int) -> LoyaltyTier:
    for tier, threshold in TIER_THRESHOLDS:
        if lifetime_points >= threshold:
            return tier
    return LoyaltyTier.BRONZE


@payment_loyalty.entity(part_of="LoyaltyAccount")
class LoyaltyTransaction:
    points_delta = Integer(required=True)
    reason = String(required=True, choices=PointsReason)
    order_id = Identifier()
    note = String(max_length=500)
    created_at = DateTime(required=True)


@payment_loyalty.aggregate
class LoyaltyAccount:
    user_id = Identifier(required=True)
    points_balance = Integer(default=0)
    lifetime_points = Integer(default=0)
    tier = String(choices=LoyaltyTier, default=LoyaltyTier.BRONZE.value)
    transactions = HasMany(LoyaltyTransaction)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def balance_is_not_negative(self):
        if self.points_balance is not None and self.points_balance < 0:
            raise ValidationError({"points_balance": ["Points balance cannot be negative"]})

    @classmethod
    def enroll(cls, user_id):
        now = utcnow()
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def _record(self, delta, reason: PointsReason, order_id=None, note=None):
        self.add_transactions(
            LoyaltyTransaction(
                points_delta=delta,
                reason=reason.value,
                order_id=order_id,
                note=note,
                created_at=utcnow(),
            )
        )
        self.updated_at = utcnow()

    def award(self, points: int, order_id=None, note=None) -> int:
        if points <= 0:
            raise ValidationError({"points": ["Points to award must be positive"]})
        self.points_balance += points
        self.lifetime_points += points
        self.tier = tier_for(self.lifetime_points).value
        self._record(points, PointsReason.EARN, order_id, note)
        return self.points_balance

    def redeem(self, points: int, order_id=None) -> int:
        if points <= 0:
            raise ValidationError({"points": ["Points to redeem must be positive"]})
        if points > self.points_balance:
            raise ValidationError({"points": [f"Insufficient points balance ({self.points_balance})"]})
        self.points_balance -= points
        self._record(-points, PointsReason.REDEEM, order_id)
        return self.points_balance

    def adjust(self, delta: int, note=None) -> int:
        if delta == 0:
            raise ValidationError({"points": ["Adjustment cannot be zero"]})
        if self.points_balance + delta < 0:
            raise ValidationError({"points": ["Adjustment would make the balance negative"]})
        self.points_balance += delta
        if delta > 0:
            self.lifetime_points += delta
            self.tier = tier_for(self.lifetime_points).value
        self._record(delta, PointsReason.ADJUST, note=note)
        return self.points_balance
