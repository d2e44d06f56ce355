"""Newsletter subscriptions, one per email address."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, String
from protean.utils.globals import current_domain

from engagement.domain import engagement, logger
from shared.clock import utcnow
from shared.email import normalize_email
from shared.status import StatusEnum


class SubscriptionStatus(StatusEnum):
    ACTIVE = "active"
    UNSUBSCRIBED = "unsubscribed"
    BOUNCED = "bounced"


@engagement.aggregate
class NewsletterSubscription:
    email = String(required=True, max_length=254, unique=True)
    source = String(max_length=50, default="website")
    status = String(choices=SubscriptionStatus, default=SubscriptionStatus.ACTIVE.value)
    subscribed_at = DateTime()
    unsubscribed_at = DateTime()

    @classmethod
    def subscribe(cls, email, source=None):
        return cls(email=normalize_email(email), source=source or "website", subscribed_at=utcnow())

    def resubscribe(self, source=None):
        self.status = SubscriptionStatus.ACTIVE.value
        if source:
            self.source = source
        self.subscribed_at = utcnow()
        self.unsubscribed_at = None

    def unsubscribe(self):
        if self.status == SubscriptionStatus.UNSUBSCRIBED.value:
            return
        self.status = SubscriptionStatus.UNSUBSCRIBED.value
        self.unsubscribed_at = utcnow()

    def mark_bounced(self):
        self.status = SubscriptionStatus.BOUNCED.value


@engagement.command(part_of=NewsletterSubscription)
class SubscribeToNewsletter:
    email = String(required=True, max_length=254)
    source = String(max_length=50)


@engagement.command(part_of=NewsletterSubscription)
class UnsubscribeFromNewsletter:
    email = String(required=True, max_length=254)


def find_subscription(email):
    dao = current_domain.repository_for(NewsletterSubscription)._dao
    matches = dao.query.filter(email=normalize_email(email)).all().items
    return matches[0] if matches else None


@engagement.command_handler(part_of=NewsletterSubscription)
class NewsletterHandler:
    @handle(SubscribeToNewsletter)
    def subscribe(self, command):
        repo = current_domain.repository_for(NewsletterSubscription)
        subscription = find_subscription(command.email)
        if subscription is None:
            subscription = NewsletterSubscription.subscribe(command.email, command.source)
        elif subscription.status != SubscriptionStatus.ACTIVE.value:
            subscription.resubscribe(command.source)
        repo.add(subscription)
        logger.info("Newsletter subscription active", subscription_id=str(subscription.id))
        return str(subscription.id)

    @handle(UnsubscribeFromNewsletter)
    def unsubscribe(self, command):
        subscription = find_subscription(command.email)
        if subscription is None:
            raise ObjectNotFoundError(f"No subscription for {command.email}")
        subscription.unsubscribe()
        current_domain.repository_for(NewsletterSubscription).add(subscription)
        return subscription.status
