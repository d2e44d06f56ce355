"""ProductReview aggregate.

State Machine:
    PENDING → APPROVED | REJECTED | FLAGGED
    APPROVED → FLAGGED | REJECTED
    FLAGGED → APPROVED | REJECTED
"""

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from engagement.domain import engagement
from engagement.review.events import ReviewStatusChanged
from shared.clock import utcnow
from shared.status import StatusEnum, assert_transition


class ReviewStatus(StatusEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: {ReviewStatus.APPROVED, ReviewStatus.REJECTED, ReviewStatus.FLAGGED},
    ReviewStatus.APPROVED: {ReviewStatus.FLAGGED, ReviewStatus.REJECTED},
    ReviewStatus.FLAGGED: {ReviewStatus.APPROVED, ReviewStatus.REJECTED},
    ReviewStatus.REJECTED: set(),
}

MODERATION_ACTIONS = {
    "approve": ReviewStatus.APPROVED,
    "reject": ReviewStatus.REJECTED,
    "flag": ReviewStatus.FLAGGED,
}


@engagement.aggregate
class ProductReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(max_length=200)
    body = Text()
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    moderation_note = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, product_id, user_id, rating, title=None, body=None):
        now = utcnow()
        return cls(
            product_id=product_id,
            user_id=user_id,
            rating=rating,
            title=title.strip() if title else None,
            body=body.strip() if body else None,
            created_at=now,
            updated_at=now,
        )

    def moderate(self, action, note=None):
        target = MODERATION_ACTIONS.get((action or "").strip().lower())
        if target is None:
            raise ValidationError({"action": [f"Unknown action: {action}. Valid: {', '.join(MODERATION_ACTIONS)}"]})

        current = ReviewStatus.from_string(self.status)
        if current == target:
            return
        assert_transition(_VALID_TRANSITIONS, current, target)

        now = utcnow()
        self.status = target.value
        self.moderation_note = note
        self.updated_at = now
        self.raise_(
            ReviewStatusChanged(
                review_id=str(self.id),
                product_id=str(self.product_id),
                rating=self.rating,
                from_status=current.value,
                to_status=target.value,
                changed_at=now,
            )
        )
