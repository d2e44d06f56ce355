"""Domain tests for the AnalyticsEvent aggregate."""

from uuid import uuid4

import pytest
from analytics.tracking.event import AnalyticsEvent, AnalyticsEventType
from analytics.tracking.events import EventTracked
from protean.exceptions import ValidationError


class TestAnalyticsEvent:
    def test_record_product_view(self):
        product_id = str(uuid4())
        event = AnalyticsEvent.record(
            "Product_View", session_id=" s-1 ", guest_token="guest-1", product_id=product_id, event_data={"source": "search"}
        )
        assert event.event_type == AnalyticsEventType.PRODUCT_VIEW.value
        assert event.session_id == "s-1"
        assert event.data() == {"source": "search"}
        tracked = event._events[-1]
        assert isinstance(tracked, EventTracked)
        assert tracked.product_id == product_id

    def test_needs_exactly_one_visitor_identity(self):
        with pytest.raises(ValidationError):
            AnalyticsEvent.record("search", session_id="s-1")
        with pytest.raises(ValidationError):
            AnalyticsEvent.record("search", session_id="s-1", user_id=str(uuid4()), guest_token="guest-1")

    @pytest.mark.parametrize("event_type", ["product_view", "add_to_cart", "purchase", "wishlist_add"])
    def test_product_events_need_a_product(self, event_type):
        with pytest.raises(ValidationError) as exc:
            AnalyticsEvent.record(event_type, session_id="s-1", user_id=str(uuid4()))
        assert "product_id" in exc.value.messages

    def test_non_product_events(self):
        event = AnalyticsEvent.record(
            "begin_checkout", session_id="s-1", user_id=str(uuid4()), cart_id=str(uuid4()), event_data={"cart_total": 90}
        )
        assert event.product_id is None
        assert event._events[-1].amount is None

    def test_cart_events_carry_quantity_and_price(self):
        event = AnalyticsEvent.record(
            "add_to_cart",
            session_id="s-1",
            guest_token="guest-1",
            product_id=str(uuid4()),
            event_data={"quantity": 2, "price": 45.0},
        )
        assert event._events[-1].quantity == 2
        assert event._events[-1].amount == 45.0

    def test_unknown_event_type(self):
        with pytest.raises(ValidationError):
            AnalyticsEvent.record("teleport", session_id="s-1", user_id=str(uuid4()))

    def test_blank_session(self):
        with pytest.raises(ValidationError):
            AnalyticsEvent.record("search", session_id="  ", user_id=str(uuid4()))
