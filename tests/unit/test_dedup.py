"""Tests for DedupResolver."""

from __future__ import annotations

from datetime import timedelta

import pytest

from frontdesk.escalation.dedup import DedupResolver
from tests.fakes import ManualClock, MemoryTicketStore


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store():
    return MemoryTicketStore()


@pytest.fixture
def resolver(store):
    return DedupResolver(store, window=timedelta(seconds=60), scan_limit=5)


def test_reuses_canonically_equal_pending_ticket(store, resolver, clock):
    ticket = store.create("c1", "Are you open on Sundays?", clock.now())
    clock.advance(30)
    found = resolver.find_reusable("c1", "  are you OPEN on sundays?  ", clock.now())
    assert found is not None
    assert found.id == ticket.id


def test_window_boundary_is_inclusive(store, resolver, clock):
    ticket = store.create("c1", "q", clock.now())
    clock.advance(60)
    assert resolver.find_reusable("c1", "q", clock.now()).id == ticket.id
    clock.advance(1)
    assert resolver.find_reusable("c1", "q", clock.now()) is None


def test_other_asker_not_reused(store, resolver, clock):
    store.create("c1", "q", clock.now())
    assert resolver.find_reusable("c2", "q", clock.now()) is None


def test_different_question_not_reused(store, resolver, clock):
    store.create("c1", "are you open on sundays?", clock.now())
    assert resolver.find_reusable("c1", "are you open on mondays?", clock.now()) is None


def test_terminal_ticket_not_reused(store, resolver, clock):
    ticket = store.create("c1", "q", clock.now())
    store.mark_unresolved(ticket.id, clock.now())
    assert resolver.find_reusable("c1", "q", clock.now()) is None


def test_only_recent_pending_tickets_are_scanned(store, clock):
    resolver = DedupResolver(store, window=timedelta(seconds=60), scan_limit=2)
    store.create("c1", "oldest question", clock.now())
    clock.advance(1)
    store.create("c1", "second", clock.now())
    clock.advance(1)
    store.create("c1", "third", clock.now())
    assert resolver.find_reusable("c1", "oldest question", clock.now()) is None
    assert resolver.find_reusable("c1", "third", clock.now()) is not None
