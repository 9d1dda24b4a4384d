"""Duplicate-ask suppression."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from frontdesk.core.protocols import ITicketStore
from frontdesk.escalation.normalizer import canonicalize
from frontdesk.models.ticket import Ticket

logger = logging.getLogger(__name__)


class DedupResolver:
    """Finds a pending ticket that a repeated ask can reuse.

    A ticket is reusable when it belongs to the same asker, is still pending,
    asks the canonically same question, and is no older than ``window``.
    Only the ``scan_limit`` most recent pending tickets of the asker are
    considered.
    """

    def __init__(self, tickets: ITicketStore, window: timedelta = timedelta(seconds=60),
                 scan_limit: int = 5) -> None:
        self._tickets = tickets
        self._window = window
        self._scan_limit = scan_limit

    def find_reusable(self, asker_id: str, question: str, now: datetime) -> Ticket | None:
        wanted = canonicalize(question)
        for ticket in self._tickets.list_pending(asker_id, limit=self._scan_limit):
            if not ticket.is_pending:
                continue
            if canonicalize(ticket.question) == wanted and ticket.age_seconds(now) <= self._window.total_seconds():
                logger.debug("Reusing ticket %s for asker %s", ticket.id, asker_id)
                return ticket
        return None
