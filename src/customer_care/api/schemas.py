"""Pydantic request schemas for the Customer Care API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from shared.api import UUIDStr


# ---------------------------------------------------------------------------
# Tickets
# ---------------------------------------------------------------------------
class CreateTicketRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "source": "web",
                    "subject": "Wrong size delivered",
                    "priority": "high",
                    "message": "I ordered an M but received an L.",
                }
            ]
        }
    }

    source: str = Field(..., max_length=20)
    subject: str = Field(..., min_length=1, max_length=255)
    user_id: UUIDStr | None = None
    order_id: UUIDStr | None = None
    priority: str | None = Field(None, max_length=20)
    message: str | None = None


class TicketStatusRequest(BaseModel):
    status: str = Field(..., max_length=20)


class TicketPriorityRequest(BaseModel):
    priority: str = Field(..., max_length=20)


class TicketSubjectRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)


class AssignRequest(BaseModel):
    agent_id: UUIDStr


class TicketMessageRequest(BaseModel):
    sender: str = Field(..., max_length=20)
    body: str = Field(..., min_length=1)
    sender_id: UUIDStr | None = None


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------
class CreateAgentRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    roster: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)


class AgentSkillsRequest(BaseModel):
    skills: list[str]


class AgentRosterRequest(BaseModel):
    roster: list[str]


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------
class StartChatRequest(BaseModel):
    user_id: UUIDStr | None = None
    topic: str | None = Field(None, max_length=255)
    priority: str | None = Field(None, max_length=20)


class ChatMessageRequest(BaseModel):
    sender_type: str = Field(..., max_length=20)
    body: str = Field(..., min_length=1)
    sender_id: UUIDStr | None = None


class ChatStatusRequest(BaseModel):
    status: str = Field(..., max_length=20)


# ---------------------------------------------------------------------------
# Returns
# ---------------------------------------------------------------------------
class CreateReturnRequestBody(BaseModel):
    order_id: UUIDStr
    rma_type: str = Field(..., max_length=20)
    reason: str | None = None


class ReturnItemRequest(BaseModel):
    order_item_id: UUIDStr
    quantity: int = Field(..., ge=1)
    condition: str | None = Field(None, max_length=20)
    disposition: str | None = Field(None, max_length=20)
    fees: float | None = Field(None, ge=0)


class ReturnItemConditionRequest(BaseModel):
    condition: str | None = Field(None, max_length=20)
    disposition: str | None = Field(None, max_length=20)


class ReturnStatusRequest(BaseModel):
    status: str = Field(..., max_length=20)


class RejectReturnRequest(BaseModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Repairs, goodwill and feedback
# ---------------------------------------------------------------------------
class CreateRepairRequest(BaseModel):
    order_item_id: UUIDStr
    notes: str | None = None


class RepairStatusRequest(BaseModel):
    status: str = Field(..., max_length=20)
    note: str | None = None


class CreateGoodwillRequest(BaseModel):
    goodwill_type: str = Field(..., max_length=20)
    value: float = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    user_id: UUIDStr | None = None
    order_id: UUIDStr | None = None
    ticket_id: UUIDStr | None = None
    reason: str | None = None


class FeedbackRequest(BaseModel):
    user_id: UUIDStr | None = None
    ticket_id: UUIDStr | None = None
    order_id: UUIDStr | None = None
    nps_score: int | None = Field(None, ge=0, le=10)
    csat_score: int | None = Field(None, ge=1, le=5)
    comment: str | None = None
