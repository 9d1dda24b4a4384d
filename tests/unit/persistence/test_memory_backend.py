"""Concurrency tests for the in-memory ticket store."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

from frontdesk.core.exceptions import TicketConflictError
from frontdesk.models.ticket import TicketStatus
from frontdesk.persistence.memory_backend import MemoryKnowledgeStore, MemoryTicketStore

T0 = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
LATER = T0 + timedelta(minutes=11)


def _race(store: MemoryTicketStore, ticket_id: str) -> tuple[bool, bool]:
    """Resolve and sweep the same ticket at once; report who committed."""
    barrier = threading.Barrier(2)

    def resolve() -> bool:
        barrier.wait()
        try:
            store.resolve(ticket_id, "answer", LATER)
            return True
        except TicketConflictError:
            return False

    def sweep() -> bool:
        barrier.wait()
        return store.sweep_expired(LATER, timedelta(minutes=10)) == [ticket_id]

    with ThreadPoolExecutor(max_workers=2) as pool:
        resolved = pool.submit(resolve)
        swept = pool.submit(sweep)
        return resolved.result(), swept.result()


class TestResolveSweepRace:
    def test_exactly_one_writer_wins(self):
        for _ in range(50):
            store = MemoryTicketStore()
            ticket = store.create("c1", "q", T0)
            resolved, swept = _race(store, ticket.id)
            assert resolved != swept
            final = store.get(ticket.id)
            if resolved:
                assert final.status == TicketStatus.RESOLVED
                assert final.answer == "answer"
            else:
                assert final.status == TicketStatus.UNRESOLVED
                assert final.answer is None


class TestConcurrentCreates:
    def test_parallel_creates_keep_every_ticket(self):
        store = MemoryTicketStore()
        with ThreadPoolExecutor(max_workers=8) as pool:
            tickets = list(pool.map(lambda i: store.create(f"c{i % 4}", f"q{i}", T0), range(200)))
        assert len({t.id for t in tickets}) == 200
        assert len(store.list_all(limit=1000)) == 200


class TestKnowledgeScanLimit:
    def test_substring_scan_stops_at_limit(self):
        store = MemoryKnowledgeStore(scan_limit=2)
        store.upsert("alpha", "A", T0)
        store.upsert("beta", "B", T0)
        store.upsert("gamma", "C", T0)
        assert store.lookup("tell me about beta please") == "B"
        assert store.lookup("tell me about gamma please") is None
        assert store.lookup("gamma") == "C"
