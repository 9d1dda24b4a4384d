"""EscalationEngine: answer from knowledge, or escalate to a supervisor and learn."""

from __future__ import annotations

import logging
from datetime import timedelta

from frontdesk.core.config import EscalationConfig
from frontdesk.core.exceptions import InvalidRequestError, TicketConflictError, TicketNotFoundError
from frontdesk.core.protocols import IClock, IKnowledgeStore, INotificationSink, ITicketStore
from frontdesk.escalation.dedup import DedupResolver
from frontdesk.models.knowledge import KnowledgeEntry
from frontdesk.models.results import Answered, AskResult, Escalated
from frontdesk.models.ticket import Ticket, TicketStatus

logger = logging.getLogger(__name__)


def _require(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise InvalidRequestError(field, "must not be empty")
    return value


def _limit(limit: int | None, default: int) -> int:
    if limit is None:
        return default
    if limit < 1:
        raise InvalidRequestError("limit", "must be at least 1")
    return limit


class EscalationEngine:
    """Orchestrates the ask and resolve paths over injected stores.

    Ask: knowledge hit -> Answered; reusable pending ticket -> Escalated with
    deduped=True; otherwise a new ticket and a supervisor notification.

    Resolve with an answer: the answer is learned into the knowledge store,
    then the ticket moves to resolved and the asker is notified. If the
    knowledge write fails the ticket stays pending and the error propagates.
    """

    def __init__(
        self,
        *,
        tickets: ITicketStore,
        knowledge: IKnowledgeStore,
        notifier: INotificationSink,
        clock: IClock,
        config: EscalationConfig | None = None,
    ) -> None:
        self._config = config or EscalationConfig()
        self._tickets = tickets
        self._knowledge = knowledge
        self._notifier = notifier
        self._clock = clock
        self._dedup = DedupResolver(
            tickets,
            window=timedelta(seconds=self._config.dedup_window_seconds),
            scan_limit=self._config.pending_scan_limit,
        )

    def ask(self, asker_id: str, question: str) -> AskResult:
        _require("asker_id", asker_id)
        _require("question", question)

        answer = self._knowledge.lookup(question)
        if answer is not None:
            return Answered(answer=answer)

        now = self._clock.now()
        existing = self._dedup.find_reusable(asker_id, question, now)
        if existing is not None:
            logger.info("Deduplicated ask from %s onto ticket %s", asker_id, existing.id)
            return Escalated(ticket_id=existing.id, deduped=True)

        ticket = self._tickets.create(asker_id, question, now)
        logger.info("Created ticket %s for asker %s", ticket.id, asker_id)
        self._notify("needs_supervisor", ticket)
        return Escalated(ticket_id=ticket.id, deduped=False)

    def list_tickets(self, limit: int | None = None) -> list[Ticket]:
        return self._tickets.list_all(limit=_limit(limit, self._config.ticket_list_limit))

    def list_knowledge(self, limit: int | None = None) -> list[KnowledgeEntry]:
        return self._knowledge.list(limit=_limit(limit, self._config.knowledge_list_limit))

    def resolve_ticket(self, ticket_id: str, answer: str | None = None,
                       status: str | None = None) -> Ticket:
        _require("ticket_id", ticket_id)
        if status is not None and status != TicketStatus.UNRESOLVED:
            raise InvalidRequestError("status", f"unsupported value {status!r}")

        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)

        if answer is not None and answer.strip():
            return self._resolve_with_answer(ticket, answer.strip())

        if status == TicketStatus.UNRESOLVED:
            updated = self._tickets.mark_unresolved(ticket_id, self._clock.now())
            logger.info("Ticket %s marked unresolved by supervisor", ticket_id)
            return updated

        return ticket

    def _resolve_with_answer(self, ticket: Ticket, answer: str) -> Ticket:
        if not ticket.is_pending:
            raise TicketConflictError(ticket.id, ticket.status)

        now = self._clock.now()
        self._knowledge.upsert(ticket.question, answer, now)
        try:
            updated = self._tickets.resolve(ticket.id, answer, now)
        except TicketConflictError:
            logger.warning(
                "Ticket %s left pending before the supervisor answer committed; answer kept in knowledge",
                ticket.id,
            )
            raise
        logger.info("Ticket %s resolved; answer learned", ticket.id)
        self._notify("followup_ready", ticket.asker_id, answer, ticket.id)
        return updated

    def _notify(self, event: str, *args) -> None:
        # The mutation already committed; a failing sink must not undo it.
        try:
            getattr(self._notifier, event)(*args)
        except Exception:
            logger.exception("Notification %s failed", event)
