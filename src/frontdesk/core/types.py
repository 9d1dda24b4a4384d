"""Type aliases used across the FrontDesk service."""

from __future__ import annotations

TicketId = str
AskerId = str
CanonicalText = str
