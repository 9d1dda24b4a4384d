"""Protocol interfaces for all FrontDesk abstractions.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable

from frontdesk.core.types import AskerId, TicketId
from frontdesk.models.knowledge import KnowledgeEntry
from frontdesk.models.ticket import Ticket


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

@runtime_checkable
class IClock(Protocol):
    """Source of the current time (UTC, timezone-aware)."""

    def now(self) -> datetime: ...


# ---------------------------------------------------------------------------
# Persistence: Ticket Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ITicketStore(Protocol):
    """Authoritative set of escalation tickets.

    ``resolve`` and ``mark_unresolved`` are compare-and-set from ``pending``:
    they raise TicketNotFoundError for unknown ids and TicketConflictError for
    tickets already in a terminal state.
    """

    def create(self, asker_id: AskerId, question: str, now: datetime) -> Ticket: ...

    def get(self, ticket_id: TicketId) -> Ticket | None: ...

    def list_pending(self, asker_id: AskerId, limit: int = 5) -> list[Ticket]: ...

    def list_all(self, limit: int = 200) -> list[Ticket]: ...

    def resolve(self, ticket_id: TicketId, answer: str, now: datetime) -> Ticket: ...

    def mark_unresolved(self, ticket_id: TicketId, now: datetime) -> Ticket: ...

    def sweep_expired(self, now: datetime, deadline: timedelta) -> list[TicketId]: ...


# ---------------------------------------------------------------------------
# Persistence: Knowledge Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IKnowledgeStore(Protocol):
    """Learned question -> answer pairs keyed by canonical question."""

    def lookup(self, question: str) -> str | None: ...

    def upsert(self, question: str, answer: str, now: datetime) -> KnowledgeEntry: ...

    def list(self, limit: int = 500) -> list[KnowledgeEntry]: ...


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@runtime_checkable
class INotificationSink(Protocol):
    """Receiver of supervisor and follow-up events."""

    def needs_supervisor(self, ticket: Ticket) -> None: ...

    def followup_ready(self, asker_id: AskerId, answer: str, ticket_id: TicketId) -> None: ...

    def ticket_timed_out(self, ticket_id: TicketId) -> None: ...
