"""FastAPI routes for the Analytics domain.

Tracking endpoints are public and enrich events with the caller's user agent
and address; reporting endpoints are for staff.
"""

import json

from fastapi import APIRouter, Depends, Request
from protean.utils.globals import current_domain

from analytics import queries
from analytics.api.schemas import TrackEventRequest, TrackProductViewRequest, TrackPurchaseRequest
from analytics.tracking.tracking import TrackEvent, TrackProductView, TrackPurchase
from shared.api import UUIDStr
from shared.auth import require_role
from shared.result import CommandResult

router = APIRouter(prefix="/analytics", tags=["analytics"])

_staff = [Depends(require_role("admin", "staff"))]


def _request_context(request: Request) -> dict:
    return {
        "user_agent": (request.headers.get("user-agent") or "")[:500] or None,
        "ip_address": request.client.host if request.client else None,
    }


@router.post("/events", status_code=201, response_model=CommandResult)
async def track_event(body: TrackEventRequest, request: Request) -> CommandResult:
    data = body.model_dump()
    data["event_data"] = json.dumps(data["event_data"]) if data["event_data"] is not None else None
    event_id = current_domain.process(TrackEvent(**data, **_request_context(request)), asynchronous=False)
    return CommandResult.ok({"event_id": event_id})


@router.post("/events/product-view", status_code=201, response_model=CommandResult)
async def track_product_view(body: TrackProductViewRequest, request: Request) -> CommandResult:
    command = TrackProductView(**body.model_dump(), **_request_context(request))
    event_id = current_domain.process(command, asynchronous=False)
    return CommandResult.ok({"event_id": event_id})


@router.post("/events/purchase", status_code=201, response_model=CommandResult)
async def track_purchase(body: TrackPurchaseRequest, request: Request) -> CommandResult:
    data = body.model_dump()
    data["items"] = json.dumps(data["items"])
    event_ids = current_domain.process(TrackPurchase(**data, **_request_context(request)), asynchronous=False)
    return CommandResult.ok({"event_ids": event_ids})


@router.get("/products/top-viewed", response_model=CommandResult, dependencies=_staff)
async def top_viewed(limit: int = 10) -> CommandResult:
    return CommandResult.ok(queries.top_viewed_products(limit))


@router.get("/products/{product_id}", response_model=CommandResult, dependencies=_staff)
async def product_engagement(product_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.product_engagement(product_id))


@router.get("/daily", response_model=CommandResult, dependencies=_staff)
async def daily_counts(
    date_from: str | None = None,
    date_to: str | None = None,
    event_type: str | None = None,
) -> CommandResult:
    return CommandResult.ok(queries.daily_counts(date_from, date_to, event_type))
