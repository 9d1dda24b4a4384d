"""In-memory backends: the reference store for local runs and unit tests."""

from __future__ import annotations

import itertools
import threading
import uuid
from datetime import datetime, timedelta

from frontdesk.core.exceptions import TicketConflictError, TicketNotFoundError
from frontdesk.escalation.normalizer import canonicalize, mentions
from frontdesk.models.knowledge import KnowledgeEntry
from frontdesk.models.ticket import Ticket, TicketStatus


class MemoryTicketStore:
    """Dict-backed ITicketStore.

    Each ticket has its own lock, so transitions on different tickets never
    wait on each other. ``_index_lock`` only guards the id/asker indexes and
    is never held while a ticket lock is taken.
    """

    def __init__(self) -> None:
        self._tickets: dict[str, Ticket] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._seq: dict[str, int] = {}
        self._by_asker: dict[str, list[str]] = {}
        self._index_lock = threading.Lock()
        self._counter = itertools.count()

    def create(self, asker_id: str, question: str, now: datetime) -> Ticket:
        ticket = Ticket(id=uuid.uuid4().hex, asker_id=asker_id, question=question, created_at=now)
        with self._index_lock:
            self._tickets[ticket.id] = ticket
            self._locks[ticket.id] = threading.Lock()
            self._seq[ticket.id] = next(self._counter)
            self._by_asker.setdefault(asker_id, []).append(ticket.id)
        return ticket

    def get(self, ticket_id: str) -> Ticket | None:
        return self._tickets.get(ticket_id)

    def list_pending(self, asker_id: str, limit: int = 5) -> list[Ticket]:
        with self._index_lock:
            ids = list(self._by_asker.get(asker_id, ()))
        pending = [t for t in map(self._tickets.get, ids) if t is not None and t.is_pending]
        return self._recent_first(pending)[:limit]

    def list_all(self, limit: int = 200) -> list[Ticket]:
        with self._index_lock:
            tickets = list(self._tickets.values())
        return self._recent_first(tickets)[:limit]

    def resolve(self, ticket_id: str, answer: str, now: datetime) -> Ticket:
        return self._transition(ticket_id, lambda t: t.resolved(answer, now))

    def mark_unresolved(self, ticket_id: str, now: datetime) -> Ticket:
        return self._transition(ticket_id, lambda t: t.expired())

    def sweep_expired(self, now: datetime, deadline: timedelta) -> list[str]:
        with self._index_lock:
            candidates = [t.id for t in self._tickets.values() if t.is_pending]
        expired: list[str] = []
        for ticket_id in candidates:
            with self._locks[ticket_id]:
                current = self._tickets[ticket_id]
                # Re-checked under the lock: a resolve may have landed since the scan.
                if current.is_pending and now - current.created_at > deadline:
                    self._tickets[ticket_id] = current.expired()
                    expired.append(ticket_id)
        return expired

    def _transition(self, ticket_id: str, change) -> Ticket:
        lock = self._locks.get(ticket_id)
        if lock is None:
            raise TicketNotFoundError(ticket_id)
        with lock:
            current = self._tickets[ticket_id]
            if current.status != TicketStatus.PENDING:
                raise TicketConflictError(ticket_id, current.status)
            updated = change(current)
            self._tickets[ticket_id] = updated
            return updated

    def _recent_first(self, tickets: list[Ticket]) -> list[Ticket]:
        return sorted(tickets, key=lambda t: (t.created_at, self._seq[t.id]), reverse=True)


class MemoryKnowledgeStore:
    """Dict-backed IKnowledgeStore; substring scans run in insertion order."""

    def __init__(self, scan_limit: int = 500) -> None:
        self._entries: dict[str, KnowledgeEntry] = {}
        self._lock = threading.Lock()
        self._scan_limit = scan_limit

    def lookup(self, question: str) -> str | None:
        key = canonicalize(question)
        with self._lock:
            exact = self._entries.get(key)
            if exact is not None:
                return exact.answer
            entries = list(itertools.islice(self._entries.values(), self._scan_limit))
        for entry in entries:
            if mentions(key, entry.question):
                return entry.answer
        return None

    def upsert(self, question: str, answer: str, now: datetime) -> KnowledgeEntry:
        entry = KnowledgeEntry(question=canonicalize(question), answer=answer, updated_at=now)
        with self._lock:
            self._entries[entry.question] = entry
        return entry

    def list(self, limit: int = 500) -> list[KnowledgeEntry]:
        with self._lock:
            return list(itertools.islice(self._entries.values(), limit))
