"""Asker-facing endpoint: answer from knowledge or escalate."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from frontdesk.api.routes.deps import get_engine
from frontdesk.escalation.engine import EscalationEngine
from frontdesk.models.results import AskResult

router = APIRouter(tags=["ask"])


class AskRequest(BaseModel):
    asker_id: str = ""
    question: str = ""


@router.post("/ask", response_model=AskResult)
def ask(request: AskRequest, engine: EscalationEngine = Depends(get_engine)) -> AskResult:
    return engine.ask(request.asker_id, request.question)
