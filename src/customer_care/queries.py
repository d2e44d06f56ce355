"""Read-side queries for the customer care context."""

from protean.utils.globals import current_domain

from customer_care.agent.agent import SupportAgent
from customer_care.chat.chat import ChatSession
from customer_care.feedback.feedback import CustomerFeedback, net_promoter_score
from customer_care.goodwill.goodwill import GoodwillRecord
from customer_care.repair.repair import Repair
from customer_care.returns.return_request import ReturnRequest, RmaStatus
from customer_care.ticket.ticket import SupportTicket, TicketPriority, TicketStatus
from shared.clock import as_aware
from shared.paging import paginate


def _query(aggregate_cls, **filters):
    dao = current_domain.repository_for(aggregate_cls)._dao
    filters = {k: v for k, v in filters.items() if v is not None}
    return dao.query.filter(**filters).all().items if filters else dao.query.all().items


def _newest_first(items, attr="created_at"):
    return sorted(items, key=lambda i: as_aware(getattr(i, attr)), reverse=True)


def _with_thread(data: dict, key: str = "messages") -> dict:
    data[key] = sorted(data.get(key, []), key=lambda m: str(m["created_at"]))
    return data


def get_ticket(ticket_id: str) -> dict:
    return _with_thread(current_domain.repository_for(SupportTicket).get(ticket_id).to_dict())


def list_tickets(
    status: str | None = None,
    priority: str | None = None,
    user_id: str | None = None,
    agent_id: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    tickets = _query(
        SupportTicket,
        status=TicketStatus.from_string(status).value if status else None,
        priority=TicketPriority.from_string(priority).value if priority else None,
        user_id=user_id,
        assigned_agent_id=agent_id,
    )
    result = paginate(_newest_first(tickets), page, page_size)
    result["items"] = [
        {
            "ticket_id": str(t.id),
            "subject": t.subject,
            "status": t.status,
            "priority": t.priority,
            "source": t.source,
            "assigned_agent_id": str(t.assigned_agent_id) if t.assigned_agent_id else None,
            "message_count": len(t.messages),
            "updated_at": t.updated_at,
        }
        for t in result["items"]
    ]
    return result


def list_agents(skill: str | None = None, active_only: bool = True) -> list[dict]:
    agents = _query(SupportAgent, is_active=True if active_only else None)
    if skill:
        agents = [a for a in agents if a.has_skill(skill)]
    return [
        {"agent_id": str(a.id), "name": a.name, "skills": a.skill_list(), "roster": a.roster_list(), "is_active": a.is_active}
        for a in sorted(agents, key=lambda a: a.name)
    ]


def get_chat_session(session_id: str) -> dict:
    session = current_domain.repository_for(ChatSession).get(session_id)
    data = _with_thread(session.to_dict())
    data["duration_seconds"] = session.duration_seconds()
    return data


def get_return_request(return_id: str) -> dict:
    rma = current_domain.repository_for(ReturnRequest).get(return_id)
    data = rma.to_dict()
    data["total_quantity"] = rma.total_quantity()
    return data


def list_return_requests(order_id: str | None = None, status: str | None = None, page: int = 1, page_size: int = 20) -> dict:
    requests = _query(ReturnRequest, order_id=order_id, status=RmaStatus.from_string(status).value if status else None)
    result = paginate(_newest_first(requests), page, page_size)
    result["items"] = [r.to_dict() for r in result["items"]]
    return result


def get_repair(repair_id: str) -> dict:
    return current_domain.repository_for(Repair).get(repair_id).to_dict()


def list_goodwill(user_id: str | None = None, order_id: str | None = None) -> list[dict]:
    return [r.to_dict() for r in _newest_first(_query(GoodwillRecord, user_id=user_id, order_id=order_id))]


def feedback_summary(ticket_id: str | None = None, order_id: str | None = None) -> dict:
    feedback = _query(CustomerFeedback, ticket_id=ticket_id, order_id=order_id)
    csat = [f.csat_score for f in feedback if f.csat_score is not None]
    return {
        "responses": len(feedback),
        "nps": net_promoter_score(feedback),
        "average_csat": round(sum(csat) / len(csat), 2) if csat else None,
    }
