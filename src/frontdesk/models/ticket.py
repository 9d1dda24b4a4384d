"""Escalation ticket model and its state machine."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator


class TicketStatus(StrEnum):
    PENDING = "pending"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


class Ticket(BaseModel):
    """Snapshot of one escalated question.

    Snapshots are immutable; a state change produces a new Ticket through
    ``resolved()`` or ``expired()``, both of which re-run validation.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    asker_id: str
    question: str
    status: TicketStatus = TicketStatus.PENDING
    created_at: datetime
    answer: Optional[str] = None
    resolved_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_answer_matches_status(self) -> Ticket:
        has_answer = self.answer is not None and self.resolved_at is not None
        if self.status == TicketStatus.RESOLVED and not has_answer:
            raise ValueError("resolved ticket requires answer and resolved_at")
        if self.status != TicketStatus.RESOLVED and (
            self.answer is not None or self.resolved_at is not None
        ):
            raise ValueError(f"{self.status} ticket cannot carry answer or resolved_at")
        return self

    @property
    def is_pending(self) -> bool:
        return self.status == TicketStatus.PENDING

    def age_seconds(self, now: datetime) -> float:
        return (now - self.created_at).total_seconds()

    def resolved(self, answer: str, now: datetime) -> Ticket:
        return Ticket.model_validate(
            {**self.model_dump(), "status": TicketStatus.RESOLVED, "answer": answer, "resolved_at": now}
        )

    def expired(self) -> Ticket:
        return Ticket.model_validate({**self.model_dump(), "status": TicketStatus.UNRESOLVED})
