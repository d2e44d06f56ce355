"""Domain tests for ReturnRequest, Repair and related value rules."""

from uuid import uuid4

import pytest
from customer_care.returns.events import ReturnStatusChanged
from customer_care.returns.return_request import ReturnRequest, RmaStatus, RmaType
from customer_care.repair.repair import Repair, RepairStatus
from protean.exceptions import ValidationError


def _rma(with_item=True):
    rma = ReturnRequest.create(order_id=str(uuid4()), rma_type="return", reason="Too small")
    if with_item:
        rma.add_item(order_item_id=str(uuid4()), quantity=1, condition="new", disposition="refund")
    return rma


class TestRmaValues:
    def test_parse_and_predicate(self):
        assert RmaStatus.from_string("approved").is_approved() is True
        assert RmaStatus.from_string("eligibility").is_approved() is False

    @pytest.mark.parametrize("status", RmaStatus.values())
    def test_round_trip(self, status):
        assert RmaStatus.from_string(str(RmaStatus.from_string(status))).value == status

    def test_gift_return_is_not_a_type(self):
        with pytest.raises(ValidationError):
            RmaType.from_string("gift_return")


class TestReturnRequest:
    def test_full_lifecycle(self):
        rma = _rma()
        rma.approve()
        rma.mark_in_transit()
        rma.mark_received()
        rma.mark_refunded()
        assert rma.status == RmaStatus.REFUNDED.value
        assert len([e for e in rma._events if isinstance(e, ReturnStatusChanged)]) == 4

    def test_cannot_skip_to_received(self):
        rma = _rma()
        with pytest.raises(ValidationError):
            rma.mark_received()

    def test_approval_needs_items(self):
        with pytest.raises(ValidationError):
            _rma(with_item=False).approve()

    def test_finalized_request_is_frozen(self):
        rma = _rma()
        rma.reject()
        with pytest.raises(ValidationError):
            rma.add_item(order_item_id=str(uuid4()), quantity=1)
        with pytest.raises(ValidationError):
            rma.approve()

    def test_item_validation(self):
        rma = _rma(with_item=False)
        with pytest.raises(ValidationError):
            rma.add_item(order_item_id=str(uuid4()), quantity=0)
        with pytest.raises(ValidationError):
            rma.add_item(order_item_id=str(uuid4()), quantity=1, condition="shredded")

    def test_update_item_condition(self):
        rma = _rma()
        item = rma.items[0]
        rma.update_item_condition(item.id, condition="damaged", disposition="discard")
        assert (item.condition, item.disposition) == ("damaged", "discard")


class TestRepair:
    def test_lifecycle_with_notes(self):
        repair = Repair.create(order_item_id=str(uuid4()), notes="Broken zip")
        repair.change_status("in_progress")
        repair.change_status("completed", note="Zip replaced")
        assert repair.status == RepairStatus.COMPLETED.value
        assert repair.notes == "Broken zip\nZip replaced"

    def test_completed_repair_is_final(self):
        repair = Repair.create(order_item_id=str(uuid4()))
        repair.change_status("in_progress")
        repair.change_status("completed")
        with pytest.raises(ValidationError):
            repair.change_status("failed")
        with pytest.raises(ValidationError):
            repair.append_notes("late note")

    def test_cannot_complete_pending_repair(self):
        with pytest.raises(ValidationError):
            Repair.create(order_item_id=str(uuid4())).change_status("completed")
