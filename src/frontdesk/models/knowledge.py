"""Learned knowledge entries."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class KnowledgeEntry(BaseModel):
    """A question -> answer pair keyed by canonical question text."""

    question: str
    answer: str
    updated_at: datetime
