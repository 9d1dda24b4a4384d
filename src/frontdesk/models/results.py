"""Ask outcomes returned by the escalation engine."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

ESCALATION_MESSAGE = "Let me check with my supervisor and get back to you."


class Answered(BaseModel):
    """The knowledge base already knew the answer."""

    kind: Literal["answered"] = "answered"
    answer: str


class Escalated(BaseModel):
    """The question was handed to a supervisor (new or reused ticket)."""

    kind: Literal["escalated"] = "escalated"
    ticket_id: str
    message: str = ESCALATION_MESSAGE
    deduped: bool = False


AskResult = Annotated[Union[Answered, Escalated], Field(discriminator="kind")]
