"""Customer feedback: NPS and CSAT scores attached to a ticket or an order."""

from protean import handle, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, Text
from protean.utils.globals import current_domain

from customer_care.domain import customer_care, logger
from shared.clock import utcnow


@customer_care.aggregate
class CustomerFeedback:
    user_id = Identifier()
    ticket_id = Identifier()
    order_id = Identifier()
    nps_score = Integer(min_value=0, max_value=10)
    csat_score = Integer(min_value=1, max_value=5)
    comment = Text()
    created_at = DateTime()

    @invariant.post
    def has_at_least_one_score(self):
        if self.nps_score is None and self.csat_score is None:
            raise ValidationError({"feedback": ["At least one of NPS or CSAT score is required"]})

    def is_promoter(self) -> bool:
        return self.nps_score is not None and self.nps_score >= 9

    def is_detractor(self) -> bool:
        return self.nps_score is not None and self.nps_score <= 6


def net_promoter_score(feedback) -> float | None:
    """Percentage of promoters minus percentage of detractors, or None without NPS answers."""
    scored = [f for f in feedback if f.nps_score is not None]
    if not scored:
        return None
    promoters = sum(1 for f in scored if f.is_promoter())
    detractors = sum(1 for f in scored if f.is_detractor())
    return round((promoters - detractors) * 100 / len(scored), 1)


@customer_care.command(part_of=CustomerFeedback)
class AddCustomerFeedback:
    user_id = Identifier()
    ticket_id = Identifier()
    order_id = Identifier()
    nps_score = Integer()
    csat_score = Integer()
    comment = Text()


@customer_care.command_handler(part_of=CustomerFeedback)
class CustomerFeedbackHandler:
    @handle(AddCustomerFeedback)
    def add(self, command):
        feedback = CustomerFeedback(
            user_id=command.user_id,
            ticket_id=command.ticket_id,
            order_id=command.order_id,
            nps_score=command.nps_score,
            csat_score=command.csat_score,
            comment=command.comment,
            created_at=utcnow(),
        )
        current_domain.repository_for(CustomerFeedback).add(feedback)
        logger.info("Feedback recorded", feedback_id=str(feedback.id), nps=command.nps_score, csat=command.csat_score)
        return str(feedback.id)
