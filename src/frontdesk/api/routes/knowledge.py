"""Learned knowledge listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from frontdesk.api.routes.deps import get_engine
from frontdesk.escalation.engine import EscalationEngine

router = APIRouter(tags=["knowledge"])


class KnowledgeItem(BaseModel):
    question: str
    answer: str


class KnowledgeList(BaseModel):
    items: list[KnowledgeItem]


@router.get("/knowledge", response_model=KnowledgeList)
def list_knowledge(engine: EscalationEngine = Depends(get_engine)) -> KnowledgeList:
    entries = engine.list_knowledge()
    return KnowledgeList(items=[KnowledgeItem(question=e.question, answer=e.answer) for e in entries])
