"""FastAPI routes for the Customer Care domain."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from customer_care import queries
from customer_care.agent.agent import CreateSupportAgent, DeactivateAgent, UpdateAgentRoster, UpdateAgentSkills
from customer_care.api.schemas import (
    AgentRosterRequest,
    AgentSkillsRequest,
    AssignRequest,
    ChatMessageRequest,
    ChatStatusRequest,
    CreateAgentRequest,
    CreateGoodwillRequest,
    CreateRepairRequest,
    CreateReturnRequestBody,
    CreateTicketRequest,
    FeedbackRequest,
    RejectReturnRequest,
    RepairStatusRequest,
    ReturnItemConditionRequest,
    ReturnItemRequest,
    ReturnStatusRequest,
    StartChatRequest,
    TicketMessageRequest,
    TicketPriorityRequest,
    TicketStatusRequest,
    TicketSubjectRequest,
)
from customer_care.chat.session import AddChatMessage, AssignChatAgent, EndChatSession, StartChatSession, UpdateChatStatus
from customer_care.feedback.feedback import AddCustomerFeedback
from customer_care.goodwill.goodwill import CreateGoodwillRecord
from customer_care.repair.repair import CreateRepair, UpdateRepairStatus
from customer_care.returns.management import (
    AddReturnItem,
    ApproveReturn,
    CreateReturnRequest,
    MarkReturnInTransit,
    MarkReturnReceived,
    MarkReturnRefunded,
    RejectReturn,
    UpdateReturnItemCondition,
    UpdateReturnStatus,
)
from customer_care.ticket.management import (
    AddTicketMessage,
    AssignTicket,
    CreateSupportTicket,
    ReopenTicket,
    UpdateTicketPriority,
    UpdateTicketStatus,
    UpdateTicketSubject,
)
from shared.api import UUIDStr
from shared.auth import Principal, require_role
from shared.result import CommandResult


def _process(command):
    return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Ticket Router
# ---------------------------------------------------------------------------
ticket_router = APIRouter(prefix="/tickets", tags=["support"])


@ticket_router.post("", status_code=201, response_model=CommandResult)
async def create_ticket(body: CreateTicketRequest) -> CommandResult:
    ticket_id = _process(CreateSupportTicket(**body.model_dump()))
    return CommandResult.ok({"ticket_id": ticket_id})


@ticket_router.get("", response_model=CommandResult)
async def list_tickets(
    status: str | None = None,
    priority: str | None = None,
    user_id: str | None = None,
    agent_id: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> CommandResult:
    return CommandResult.ok(queries.list_tickets(status, priority, user_id, agent_id, page, page_size))


@ticket_router.get("/{ticket_id}", response_model=CommandResult)
async def get_ticket(ticket_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_ticket(ticket_id))


@ticket_router.put("/{ticket_id}/status", response_model=CommandResult)
async def update_ticket_status(ticket_id: UUIDStr, body: TicketStatusRequest) -> CommandResult:
    status = _process(UpdateTicketStatus(ticket_id=ticket_id, status=body.status))
    return CommandResult.ok({"ticket_id": ticket_id, "status": status})


@ticket_router.put("/{ticket_id}/priority", response_model=CommandResult)
async def update_ticket_priority(ticket_id: UUIDStr, body: TicketPriorityRequest) -> CommandResult:
    _process(UpdateTicketPriority(ticket_id=ticket_id, priority=body.priority))
    return CommandResult.ok({"ticket_id": ticket_id})


@ticket_router.put("/{ticket_id}/subject", response_model=CommandResult)
async def update_ticket_subject(ticket_id: UUIDStr, body: TicketSubjectRequest) -> CommandResult:
    _process(UpdateTicketSubject(ticket_id=ticket_id, subject=body.subject))
    return CommandResult.ok({"ticket_id": ticket_id})


@ticket_router.put("/{ticket_id}/assign", response_model=CommandResult)
async def assign_ticket(ticket_id: UUIDStr, body: AssignRequest) -> CommandResult:
    status = _process(AssignTicket(ticket_id=ticket_id, agent_id=body.agent_id))
    return CommandResult.ok({"ticket_id": ticket_id, "status": status})


@ticket_router.post("/{ticket_id}/messages", status_code=201, response_model=CommandResult)
async def add_ticket_message(ticket_id: UUIDStr, body: TicketMessageRequest) -> CommandResult:
    message_id = _process(AddTicketMessage(ticket_id=ticket_id, **body.model_dump()))
    return CommandResult.ok({"ticket_id": ticket_id, "message_id": message_id})


@ticket_router.put("/{ticket_id}/reopen", response_model=CommandResult)
async def reopen_ticket(ticket_id: UUIDStr) -> CommandResult:
    _process(ReopenTicket(ticket_id=ticket_id))
    return CommandResult.ok({"ticket_id": ticket_id, "status": "open"})


# ---------------------------------------------------------------------------
# Agent Router (staff only)
# ---------------------------------------------------------------------------
agent_router = APIRouter(
    prefix="/support-agents",
    tags=["support"],
    dependencies=[Depends(require_role("admin", "staff"))],
)


@agent_router.post("", status_code=201, response_model=CommandResult)
async def create_agent(body: CreateAgentRequest) -> CommandResult:
    agent_id = _process(CreateSupportAgent(name=body.name, roster=json.dumps(body.roster), skills=json.dumps(body.skills)))
    return CommandResult.ok({"agent_id": agent_id})


@agent_router.get("", response_model=CommandResult)
async def list_agents(skill: str | None = None, active_only: bool = True) -> CommandResult:
    return CommandResult.ok(queries.list_agents(skill, active_only))


@agent_router.put("/{agent_id}/skills", response_model=CommandResult)
async def update_agent_skills(agent_id: UUIDStr, body: AgentSkillsRequest) -> CommandResult:
    skills = _process(UpdateAgentSkills(agent_id=agent_id, skills=json.dumps(body.skills)))
    return CommandResult.ok({"agent_id": agent_id, "skills": skills})


@agent_router.put("/{agent_id}/roster", response_model=CommandResult)
async def update_agent_roster(agent_id: UUIDStr, body: AgentRosterRequest) -> CommandResult:
    roster = _process(UpdateAgentRoster(agent_id=agent_id, roster=json.dumps(body.roster)))
    return CommandResult.ok({"agent_id": agent_id, "roster": roster})


@agent_router.put("/{agent_id}/deactivate", response_model=CommandResult)
async def deactivate_agent(agent_id: UUIDStr, principal: Principal = Depends(require_role("admin"))) -> CommandResult:
    _process(DeactivateAgent(agent_id=agent_id))
    return CommandResult.ok({"agent_id": agent_id, "is_active": False})


# ---------------------------------------------------------------------------
# Chat Router
# ---------------------------------------------------------------------------
chat_router = APIRouter(prefix="/chats", tags=["support"])


@chat_router.post("", status_code=201, response_model=CommandResult)
async def start_chat(body: StartChatRequest) -> CommandResult:
    session_id = _process(StartChatSession(**body.model_dump()))
    return CommandResult.ok({"session_id": session_id})


@chat_router.get("/{session_id}", response_model=CommandResult)
async def get_chat(session_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_chat_session(session_id))


@chat_router.put("/{session_id}/assign", response_model=CommandResult)
async def assign_chat_agent(session_id: UUIDStr, body: AssignRequest) -> CommandResult:
    status = _process(AssignChatAgent(session_id=session_id, agent_id=body.agent_id))
    return CommandResult.ok({"session_id": session_id, "status": status})


@chat_router.post("/{session_id}/messages", status_code=201, response_model=CommandResult)
async def add_chat_message(session_id: UUIDStr, body: ChatMessageRequest) -> CommandResult:
    message_id = _process(AddChatMessage(session_id=session_id, **body.model_dump()))
    return CommandResult.ok({"session_id": session_id, "message_id": message_id})


@chat_router.put("/{session_id}/status", response_model=CommandResult)
async def update_chat_status(session_id: UUIDStr, body: ChatStatusRequest) -> CommandResult:
    status = _process(UpdateChatStatus(session_id=session_id, status=body.status))
    return CommandResult.ok({"session_id": session_id, "status": status})


@chat_router.put("/{session_id}/end", response_model=CommandResult)
async def end_chat(session_id: UUIDStr) -> CommandResult:
    _process(EndChatSession(session_id=session_id))
    return CommandResult.ok({"session_id": session_id, "status": "ended"})


# ---------------------------------------------------------------------------
# Return Router
# ---------------------------------------------------------------------------
return_router = APIRouter(prefix="/returns", tags=["returns"])


@return_router.post("", status_code=201, response_model=CommandResult)
async def create_return(body: CreateReturnRequestBody) -> CommandResult:
    return_id = _process(CreateReturnRequest(**body.model_dump()))
    return CommandResult.ok({"return_id": return_id})


@return_router.get("", response_model=CommandResult)
async def list_returns(order_id: str | None = None, status: str | None = None, page: int = 1, page_size: int = 20) -> CommandResult:
    return CommandResult.ok(queries.list_return_requests(order_id, status, page, page_size))


@return_router.get("/{return_id}", response_model=CommandResult)
async def get_return(return_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_return_request(return_id))


@return_router.post("/{return_id}/items", status_code=201, response_model=CommandResult)
async def add_return_item(return_id: UUIDStr, body: ReturnItemRequest) -> CommandResult:
    item_id = _process(AddReturnItem(return_id=return_id, **body.model_dump()))
    return CommandResult.ok({"return_id": return_id, "item_id": item_id})


@return_router.put("/{return_id}/items/{item_id}", response_model=CommandResult)
async def update_return_item(return_id: UUIDStr, item_id: UUIDStr, body: ReturnItemConditionRequest) -> CommandResult:
    _process(UpdateReturnItemCondition(return_id=return_id, item_id=item_id, **body.model_dump()))
    return CommandResult.ok({"return_id": return_id, "item_id": item_id})


@return_router.put("/{return_id}/status", response_model=CommandResult)
async def update_return_status(return_id: UUIDStr, body: ReturnStatusRequest) -> CommandResult:
    status = _process(UpdateReturnStatus(return_id=return_id, status=body.status))
    return CommandResult.ok({"return_id": return_id, "status": status})


@return_router.put("/{return_id}/approve", response_model=CommandResult)
async def approve_return(return_id: UUIDStr) -> CommandResult:
    return CommandResult.ok({"return_id": return_id, "status": _process(ApproveReturn(return_id=return_id))})


@return_router.put("/{return_id}/reject", response_model=CommandResult)
async def reject_return(return_id: UUIDStr, body: RejectReturnRequest) -> CommandResult:
    status = _process(RejectReturn(return_id=return_id, reason=body.reason))
    return CommandResult.ok({"return_id": return_id, "status": status})


@return_router.put("/{return_id}/in-transit", response_model=CommandResult)
async def mark_return_in_transit(return_id: UUIDStr) -> CommandResult:
    return CommandResult.ok({"return_id": return_id, "status": _process(MarkReturnInTransit(return_id=return_id))})


@return_router.put("/{return_id}/received", response_model=CommandResult)
async def mark_return_received(return_id: UUIDStr) -> CommandResult:
    return CommandResult.ok({"return_id": return_id, "status": _process(MarkReturnReceived(return_id=return_id))})


@return_router.put("/{return_id}/refunded", response_model=CommandResult)
async def mark_return_refunded(return_id: UUIDStr) -> CommandResult:
    return CommandResult.ok({"return_id": return_id, "status": _process(MarkReturnRefunded(return_id=return_id))})


# ---------------------------------------------------------------------------
# Aftercare Router: repairs, goodwill and feedback
# ---------------------------------------------------------------------------
aftercare_router = APIRouter(tags=["aftercare"])


@aftercare_router.post("/repairs", status_code=201, response_model=CommandResult)
async def create_repair(body: CreateRepairRequest) -> CommandResult:
    return CommandResult.ok({"repair_id": _process(CreateRepair(**body.model_dump()))})


@aftercare_router.get("/repairs/{repair_id}", response_model=CommandResult)
async def get_repair(repair_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_repair(repair_id))


@aftercare_router.put("/repairs/{repair_id}/status", response_model=CommandResult)
async def update_repair_status(repair_id: UUIDStr, body: RepairStatusRequest) -> CommandResult:
    status = _process(UpdateRepairStatus(repair_id=repair_id, status=body.status, note=body.note))
    return CommandResult.ok({"repair_id": repair_id, "status": status})


@aftercare_router.post("/goodwill", status_code=201, response_model=CommandResult)
async def create_goodwill(body: CreateGoodwillRequest) -> CommandResult:
    return CommandResult.ok({"record_id": _process(CreateGoodwillRecord(**body.model_dump()))})


@aftercare_router.get("/goodwill", response_model=CommandResult)
async def list_goodwill(user_id: str | None = None, order_id: str | None = None) -> CommandResult:
    return CommandResult.ok(queries.list_goodwill(user_id, order_id))


@aftercare_router.post("/feedback", status_code=201, response_model=CommandResult)
async def add_feedback(body: FeedbackRequest) -> CommandResult:
    return CommandResult.ok({"feedback_id": _process(AddCustomerFeedback(**body.model_dump()))})


@aftercare_router.get("/feedback/summary", response_model=CommandResult)
async def feedback_summary(ticket_id: str | None = None, order_id: str | None = None) -> CommandResult:
    return CommandResult.ok(queries.feedback_summary(ticket_id, order_id))
