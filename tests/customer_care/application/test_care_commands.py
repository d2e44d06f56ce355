"""Application tests for customer care commands and queries."""

import json
from uuid import uuid4

import pytest
from customer_care import queries
from customer_care.agent.agent import CreateSupportAgent, DeactivateAgent, UpdateAgentSkills
from customer_care.chat.session import AddChatMessage, AssignChatAgent, EndChatSession, StartChatSession
from customer_care.feedback.feedback import AddCustomerFeedback
from customer_care.goodwill.goodwill import CreateGoodwillRecord
from customer_care.repair.repair import CreateRepair, UpdateRepairStatus
from customer_care.returns.management import (
    AddReturnItem,
    ApproveReturn,
    CreateReturnRequest,
    MarkReturnInTransit,
    RejectReturn,
    UpdateReturnStatus,
)
from customer_care.ticket.management import (
    AddTicketMessage,
    AssignTicket,
    CreateSupportTicket,
    ReopenTicket,
    UpdateTicketPriority,
    UpdateTicketStatus,
)
from protean import current_domain
from protean.exceptions import ValidationError


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _agent(name="Ama", skills=("returns",)):
    return _process(CreateSupportAgent(name=name, skills=json.dumps(list(skills))))


def _ticket(**kwargs):
    return _process(CreateSupportTicket(source="email", subject=kwargs.pop("subject", "Refund status"), **kwargs))


class TestTicketCommands:
    def test_create_with_first_message(self):
        ticket_id = _ticket(message="Where is my refund?")
        ticket = queries.get_ticket(ticket_id)
        assert ticket["status"] == "open"
        assert ticket["messages"][0]["body"] == "Where is my refund?"

    def test_assign_and_message(self):
        ticket_id = _ticket()
        agent_id = _agent()
        assert _process(AssignTicket(ticket_id=ticket_id, agent_id=agent_id)) == "in_progress"
        _process(AddTicketMessage(ticket_id=ticket_id, sender="agent", body="Refund issued", sender_id=agent_id))

        listed = queries.list_tickets(agent_id=agent_id)
        assert listed["total"] == 1
        assert listed["items"][0]["message_count"] == 1

    def test_inactive_agent_cannot_be_assigned(self):
        agent_id = _agent()
        _process(DeactivateAgent(agent_id=agent_id))
        with pytest.raises(ValidationError):
            _process(AssignTicket(ticket_id=_ticket(), agent_id=agent_id))

    def test_status_transitions_are_checked(self):
        ticket_id = _ticket()
        _process(UpdateTicketStatus(ticket_id=ticket_id, status="closed"))
        with pytest.raises(ValidationError):
            _process(UpdateTicketStatus(ticket_id=ticket_id, status="pending"))
        with pytest.raises(ValidationError):
            _process(UpdateTicketPriority(ticket_id=ticket_id, priority="urgent"))

        _process(ReopenTicket(ticket_id=ticket_id))
        assert queries.get_ticket(ticket_id)["status"] == "open"

    def test_list_filters_by_status(self):
        _ticket()
        closed = _ticket(subject="Done")
        _process(UpdateTicketStatus(ticket_id=closed, status="closed"))
        assert queries.list_tickets(status="closed")["total"] == 1


class TestAgentCommands:
    def test_skills_normalized_and_searchable(self):
        agent_id = _agent(skills=["Returns"])
        assert _process(UpdateAgentSkills(agent_id=agent_id, skills=json.dumps(["Sizing", "sizing", " VIP "]))) == [
            "sizing",
            "vip",
        ]
        assert [a["agent_id"] for a in queries.list_agents(skill="VIP")] == [agent_id]


class TestChatCommands:
    def test_session_flow(self):
        session_id = _process(StartChatSession(user_id=str(uuid4()), topic="Fit advice"))
        assert _process(AssignChatAgent(session_id=session_id, agent_id=_agent())) == "active"
        _process(AddChatMessage(session_id=session_id, sender_type="customer", body="Does it run small?"))
        _process(EndChatSession(session_id=session_id))

        session = queries.get_chat_session(session_id)
        assert session["status"] == "ended"
        assert len(session["messages"]) == 1
        with pytest.raises(ValidationError):
            _process(AddChatMessage(session_id=session_id, sender_type="agent", body="Yes"))


class TestReturnCommands:
    def _return_with_item(self):
        return_id = _process(CreateReturnRequest(order_id=str(uuid4()), rma_type="exchange"))
        _process(AddReturnItem(return_id=return_id, order_item_id=str(uuid4()), quantity=2, condition="opened"))
        return return_id

    def test_approve_and_ship(self):
        return_id = self._return_with_item()
        assert _process(ApproveReturn(return_id=return_id)) == "approved"
        assert _process(MarkReturnInTransit(return_id=return_id)) == "in_transit"
        assert queries.get_return_request(return_id)["total_quantity"] == 2

    def test_generic_status_update_is_transition_checked(self):
        return_id = self._return_with_item()
        with pytest.raises(ValidationError):
            _process(UpdateReturnStatus(return_id=return_id, status="refunded"))

    def test_reject_records_reason(self):
        return_id = self._return_with_item()
        _process(RejectReturn(return_id=return_id, reason="Outside the return window"))
        data = queries.get_return_request(return_id)
        assert data["status"] == "rejected"
        assert data["reason"] == "Outside the return window"


class TestAftercareCommands:
    def test_repair(self):
        repair_id = _process(CreateRepair(order_item_id=str(uuid4())))
        assert _process(UpdateRepairStatus(repair_id=repair_id, status="in_progress")) == "in_progress"

    def test_goodwill_listing(self):
        user_id = str(uuid4())
        _process(CreateGoodwillRecord(goodwill_type="credit", value=10.0, user_id=user_id))
        assert len(queries.list_goodwill(user_id=user_id)) == 1

    def test_feedback_summary(self):
        ticket_id = _ticket()
        for nps, csat in ((10, 5), (6, 2)):
            _process(AddCustomerFeedback(ticket_id=ticket_id, nps_score=nps, csat_score=csat))
        summary = queries.feedback_summary(ticket_id=ticket_id)
        assert summary == {"responses": 2, "nps": 0.0, "average_csat": 3.5}
