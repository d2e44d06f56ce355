"""Loyalty commands: enrolment, earning, redeeming and adjusting points."""

import math

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from payment_loyalty.domain import logger, payment_loyalty
from payment_loyalty.loyalty.account import LoyaltyAccount
from shared.settings import get_settings


@payment_loyalty.command(part_of="LoyaltyAccount")
class EnrollInLoyalty:
    user_id = Identifier(required=True)


@payment_loyalty.command(part_of="LoyaltyAccount")
class AwardPoints:
    user_id = Identifier(required=True)
    points = Integer(required=True)
    order_id = Identifier()
    note = String(max_length=500)


@payment_loyalty.command(part_of="LoyaltyAccount")
class AwardPointsForOrder:
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_total = Float(required=True, min_value=0.0)


@payment_loyalty.command(part_of="LoyaltyAccount")
class RedeemPoints:
    user_id = Identifier(required=True)
    points = Integer(required=True)
    order_id = Identifier()


@payment_loyalty.command(part_of="LoyaltyAccount")
class AdjustPoints:
    user_id = Identifier(required=True)
    points_delta = Integer(required=True)
    note = String(max_length=500)


def find_account(user_id):
    dao = current_domain.repository_for(LoyaltyAccount)._dao
    accounts = dao.query.filter(user_id=str(user_id)).all().items
    return accounts[0] if accounts else None


def _require_account(user_id):
    account = find_account(user_id)
    if account is None:
        raise ValidationError({"user_id": [f"User {user_id} is not enrolled in loyalty"]})
    return account


def points_for_total(order_total: float) -> int:
    return math.floor(order_total * get_settings().LOYALTY_POINTS_PER_UNIT)


@payment_loyalty.command_handler(part_of=LoyaltyAccount)
class LoyaltyHandler:
    @handle(EnrollInLoyalty)
    def enroll(self, command):
        if find_account(command.user_id):
            raise ValidationError({"user_id": [f"User {command.user_id} is already enrolled"]})
        account = LoyaltyAccount.enroll(command.user_id)
        current_domain.repository_for(LoyaltyAccount).add(account)
        logger.info("Loyalty account created", user_id=str(command.user_id))
        return str(account.id)

    def _award(self, user_id, points, order_id=None, note=None):
        account = find_account(user_id) or LoyaltyAccount.enroll(user_id)
        balance = account.award(points, order_id=order_id, note=note)
        current_domain.repository_for(LoyaltyAccount).add(account)
        logger.info("Points awarded", user_id=str(user_id), points=points, tier=account.tier)
        return balance

    @handle(AwardPoints)
    def award(self, command):
        return self._award(command.user_id, command.points, command.order_id, command.note)

    @handle(AwardPointsForOrder)
    def award_for_order(self, command):
        points = points_for_total(command.order_total)
        if points <= 0:
            account = find_account(command.user_id)
            return account.points_balance if account else 0
        return self._award(command.user_id, points, command.order_id, "Order purchase")

    @handle(RedeemPoints)
    def redeem(self, command):
        account = _require_account(command.user_id)
        balance = account.redeem(command.points, command.order_id)
        current_domain.repository_for(LoyaltyAccount).add(account)
        return balance

    @handle(AdjustPoints)
    def adjust(self, command):
        account = _require_account(command.user_id)
        balance = account.adjust(command.points_delta, command.note)
        current_domain.repository_for(LoyaltyAccount).add(account)
        return balance
