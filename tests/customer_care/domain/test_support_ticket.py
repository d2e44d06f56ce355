"""Domain tests for the SupportTicket aggregate and its status values."""

from uuid import uuid4

import pytest
from customer_care.ticket.events import TicketOpened, TicketStatusChanged
from customer_care.ticket.ticket import SupportTicket, TicketPriority, TicketSource, TicketStatus
from protean.exceptions import ValidationError


def _ticket(**kwargs):
    return SupportTicket.open(source=kwargs.pop("source", "web"), subject=kwargs.pop("subject", "Late delivery"), **kwargs)


class TestTicketStatusValues:
    def test_bogus_status_rejected(self):
        with pytest.raises(ValidationError):
            TicketStatus.from_string("bogus")

    @pytest.mark.parametrize("status", TicketStatus.values())
    def test_round_trip(self, status):
        assert TicketStatus.from_string(str(TicketStatus.from_string(status))) == TicketStatus.from_string(status)

    def test_predicates(self):
        assert TicketStatus.CLOSED.is_closed()
        assert not TicketStatus.OPEN.is_closed()
        assert TicketPriority.from_string(" URGENT ").is_urgent()


class TestOpenTicket:
    def test_subject_trimmed_and_status_open(self):
        ticket = _ticket(subject="  Wrong colour  ", priority="high")
        assert ticket.subject == "Wrong colour"
        assert ticket.status == TicketStatus.OPEN.value
        assert ticket.priority == "high"
        assert any(isinstance(e, TicketOpened) for e in ticket._events)

    def test_blank_subject_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _ticket(subject="   ")
        assert exc.value.messages["subject"] == ["Ticket subject cannot be empty"]

    def test_unknown_source_rejected(self):
        with pytest.raises(ValidationError):
            _ticket(source="fax")
        assert TicketSource.from_string("Phone") == TicketSource.PHONE


class TestTicketLifecycle:
    def test_valid_transition_raises_event(self):
        ticket = _ticket()
        ticket.change_status("in_progress")
        assert ticket.status == "in_progress"
        changed = [e for e in ticket._events if isinstance(e, TicketStatusChanged)]
        assert changed[-1].from_status == "open"

    def test_same_status_is_noop(self):
        ticket = _ticket()
        ticket._events.clear()
        ticket.change_status("open")
        assert not ticket._events

    def test_closed_ticket_cannot_move_to_pending(self):
        ticket = _ticket()
        ticket.change_status("closed")
        with pytest.raises(ValidationError) as exc:
            ticket.change_status("pending")
        assert exc.value.messages["status"] == ["Cannot transition from closed to pending"]

    def test_reopen_only_resolved_or_closed(self):
        ticket = _ticket()
        with pytest.raises(ValidationError):
            ticket.reopen()
        ticket.change_status("resolved")
        ticket.reopen()
        assert ticket.status == "open"

    def test_closed_ticket_rejects_priority_and_messages(self):
        ticket = _ticket()
        ticket.change_status("closed")
        with pytest.raises(ValidationError):
            ticket.change_priority("low")
        with pytest.raises(ValidationError):
            ticket.add_message("customer", "Hello?")

    def test_assign_moves_open_ticket_in_progress(self):
        ticket = _ticket()
        ticket.assign(str(uuid4()))
        assert ticket.status == "in_progress"

    def test_messages(self):
        ticket = _ticket()
        ticket.add_message("customer", " Where is my parcel? ")
        ticket.add_message("agent", "Checking now")
        assert [m.sender for m in ticket.messages] == ["customer", "agent"]
        with pytest.raises(ValidationError):
            ticket.add_message("bot", "hi")
