"""Request-scoped accessors for objects built in the app lifespan."""

from __future__ import annotations

from fastapi import Request

from frontdesk.escalation.engine import EscalationEngine


def get_engine(request: Request) -> EscalationEngine:
    return request.app.state.engine
