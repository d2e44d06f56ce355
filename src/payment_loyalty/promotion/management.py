"""Promotion commands."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from payment_loyalty.domain import logger, payment_loyalty
from payment_loyalty.promotion.promotion import Promotion


@payment_loyalty.command(part_of="Promotion")
class CreatePromotion:
    code = String(required=True, max_length=50)
    promo_type = String(required=True, max_length=20)
    value = Float(default=0.0)
    min_order_amount = Float()
    max_discount = Float(min_value=0.0)
    starts_at = DateTime()
    ends_at = DateTime()
    usage_limit = Integer()
    description = String(max_length=500)


@payment_loyalty.command(part_of="Promotion")
class ActivatePromotion:
    promotion_id = Identifier(required=True)


@payment_loyalty.command(part_of="Promotion")
class DeactivatePromotion:
    promotion_id = Identifier(required=True)


@payment_loyalty.command(part_of="Promotion")
class RecordPromotionUsage:
    promotion_id = Identifier(required=True)
    order_id = Identifier(required=True)
    discount_amount = Float(required=True, min_value=0.0)


def find_by_code(code):
    dao = current_domain.repository_for(Promotion)._dao
    promotions = dao.query.filter(code=(code or "").strip().upper()).all().items
    return promotions[0] if promotions else None


@payment_loyalty.command_handler(part_of=Promotion)
class PromotionHandler:
    @handle(CreatePromotion)
    def create(self, command):
        if find_by_code(command.code):
            raise ValidationError({"code": [f"Promotion code {command.code.upper()} already exists"]})
        promotion = Promotion.create(
            code=command.code,
            promo_type=command.promo_type,
            value=command.value,
            min_order_amount=command.min_order_amount,
            max_discount=command.max_discount,
            starts_at=command.starts_at,
            ends_at=command.ends_at,
            usage_limit=command.usage_limit,
            description=command.description,
        )
        current_domain.repository_for(Promotion).add(promotion)
        logger.info("Promotion created", code=promotion.code, promo_type=promotion.promo_type)
        return str(promotion.id)

    @handle(ActivatePromotion)
    def activate(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.activate()
        repo.add(promotion)

    @handle(DeactivatePromotion)
    def deactivate(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.deactivate()
        repo.add(promotion)

    @handle(RecordPromotionUsage)
    def record_usage(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.record_usage(command.order_id, command.discount_amount)
        repo.add(promotion)
        return promotion.usage_count()
