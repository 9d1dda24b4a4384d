"""Supervisor dashboard endpoints for escalation tickets."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from frontdesk.api.routes.deps import get_engine
from frontdesk.escalation.engine import EscalationEngine
from frontdesk.models.ticket import Ticket

router = APIRouter(tags=["tickets"])


class TicketList(BaseModel):
    items: list[Ticket]


class ResolveTicketRequest(BaseModel):
    answer: Optional[str] = None
    status: Optional[str] = None


@router.get("/tickets", response_model=TicketList)
def list_tickets(limit: Optional[int] = None, engine: EscalationEngine = Depends(get_engine)) -> TicketList:
    """Most recent tickets first, all statuses."""
    return TicketList(items=engine.list_tickets(limit=limit))


@router.patch("/tickets/{ticket_id}", response_model=Ticket)
def resolve_ticket(ticket_id: str, request: ResolveTicketRequest,
                   engine: EscalationEngine = Depends(get_engine)) -> Ticket:
    return engine.resolve_ticket(ticket_id, answer=request.answer, status=request.status)
