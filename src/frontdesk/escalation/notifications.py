"""Notification sinks for supervisor and follow-up events."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from frontdesk.core.log import truncate_for_log
from frontdesk.models.ticket import Ticket

logger = logging.getLogger(__name__)


class LoggingNotificationSink:
    """INotificationSink that writes each event to the application log."""

    def needs_supervisor(self, ticket: Ticket) -> None:
        logger.info(
            "Supervisor help needed for ticket %s: %r",
            ticket.id, truncate_for_log(ticket.question),
        )

    def followup_ready(self, asker_id: str, answer: str, ticket_id: str) -> None:
        logger.info(
            "Follow-up for asker %s (ticket %s): %r",
            asker_id, ticket_id, truncate_for_log(answer),
        )

    def ticket_timed_out(self, ticket_id: str) -> None:
        logger.info("Ticket %s timed out and was marked unresolved", ticket_id)


@dataclass(slots=True)
class MemoryNotificationSink:
    """INotificationSink that records events in order, for tests and local runs."""

    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def needs_supervisor(self, ticket: Ticket) -> None:
        self.events.append(("needs_supervisor", {"ticket_id": ticket.id, "question": ticket.question}))

    def followup_ready(self, asker_id: str, answer: str, ticket_id: str) -> None:
        self.events.append(("followup_ready", {"asker_id": asker_id, "answer": answer, "ticket_id": ticket_id}))

    def ticket_timed_out(self, ticket_id: str) -> None:
        self.events.append(("ticket_timed_out", {"ticket_id": ticket_id}))

    def of_kind(self, kind: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.events if name == kind]
