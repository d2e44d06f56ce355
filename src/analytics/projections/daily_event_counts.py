"""DailyEventCounts: number of tracked events per UTC day and event type."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from analytics.domain import analytics
from analytics.tracking.event import AnalyticsEvent
from analytics.tracking.events import EventTracked
from shared.clock import as_aware


@analytics.projection
class DailyEventCounts:
    key = String(identifier=True, max_length=60)  # "<YYYY-MM-DD>:<event_type>"
    date = String(required=True, max_length=10)
    event_type = String(required=True, max_length=30)
    event_count = Integer(default=0)


def day_key(day: str, event_type: str) -> str:
    return f"{day}:{event_type}"


@analytics.projector(projector_for=DailyEventCounts, aggregates=[AnalyticsEvent])
class DailyEventCountsProjector:
    @on(EventTracked)
    def on_event_tracked(self, event):
        day = as_aware(event.event_timestamp).date().isoformat()
        key = day_key(day, event.event_type)

        repo = current_domain.repository_for(DailyEventCounts)
        try:
            counts = repo.get(key)
        except ObjectNotFoundError:
            counts = DailyEventCounts(key=key, date=day, event_type=event.event_type)
        counts.event_count += 1
        repo.add(counts)
