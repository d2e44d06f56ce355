"""Domain events for the ProductReview aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from engagement.domain import engagement


@engagement.event(part_of="ProductReview")
class ReviewStatusChanged:
    """A review was moderated.

    Carries the product and rating so the rating summary can be maintained
    without reloading the review.
    """

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_at = DateTime(required=True)
