"""ProductRatingSummary: review count and average rating over approved reviews."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer
from protean.utils.globals import current_domain

from engagement.domain import engagement
from engagement.review.events import ReviewStatusChanged
from engagement.review.review import ProductReview, ReviewStatus


@engagement.projection
class ProductRatingSummary:
    product_id = Identifier(identifier=True, required=True)
    review_count = Integer(default=0)
    rating_total = Integer(default=0)
    average_rating = Float(default=0.0)
    updated_at = DateTime()


def _recalculate(summary):
    summary.average_rating = round(summary.rating_total / summary.review_count, 2) if summary.review_count else 0.0


@engagement.projector(projector_for=ProductRatingSummary, aggregates=[ProductReview])
class ProductRatingSummaryProjector:
    @on(ReviewStatusChanged)
    def on_review_status_changed(self, event):
        entered = event.to_status == ReviewStatus.APPROVED.value
        left = event.from_status == ReviewStatus.APPROVED.value
        if entered == left:
            return

        repo = current_domain.repository_for(ProductRatingSummary)
        try:
            summary = repo.get(event.product_id)
        except ObjectNotFoundError:
            if left:
                return
            summary = ProductRatingSummary(product_id=event.product_id)

        delta = 1 if entered else -1
        summary.review_count = max(0, summary.review_count + delta)
        summary.rating_total = max(0, summary.rating_total + delta * event.rating)
        _recalculate(summary)
        summary.updated_at = event.changed_at
        repo.add(summary)
