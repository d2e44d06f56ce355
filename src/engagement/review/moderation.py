"""Review submission and moderation commands."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from engagement.domain import engagement, logger
from engagement.review.review import ProductReview


@engagement.command(part_of="ProductReview")
class CreateProductReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(max_length=200)
    body = Text()


@engagement.command(part_of="ProductReview")
class ModerateReview:
    review_id = Identifier(required=True)
    action = String(required=True, max_length=20)
    note = String(max_length=500)


@engagement.command_handler(part_of=ProductReview)
class ProductReviewHandler:
    @handle(CreateProductReview)
    def create(self, command):
        dao = current_domain.repository_for(ProductReview)._dao
        if dao.query.filter(product_id=str(command.product_id), user_id=str(command.user_id)).all().items:
            raise ValidationError({"review": ["You have already reviewed this product"]})

        review = ProductReview.create(
            product_id=command.product_id,
            user_id=command.user_id,
            rating=command.rating,
            title=command.title,
            body=command.body,
        )
        current_domain.repository_for(ProductReview).add(review)
        logger.info("Review submitted", review_id=str(review.id), product_id=str(command.product_id))
        return str(review.id)

    @handle(ModerateReview)
    def moderate(self, command):
        repo = current_domain.repository_for(ProductReview)
        review = repo.get(command.review_id)
        review.moderate(command.action, command.note)
        repo.add(review)
        return review.status
