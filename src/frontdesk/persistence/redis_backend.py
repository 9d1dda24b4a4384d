"""Redis backends implementing ITicketStore and IKnowledgeStore.

Key layout (``p`` is the configured key prefix):

    p:ticket:<id>              hash, one ticket
    p:tickets                  zset, every ticket id scored by created_at
    p:tickets:pending          zset, pending ticket ids (sweeper scan)
    p:tickets:pending:<asker>  zset, pending ticket ids per asker (dedup)
    p:knowledge                hash, canonical question -> JSON entry

Ticket transitions use WATCH/MULTI on the ticket hash, so a resolve and a
sweep racing on the same ticket commit at most once.
"""

from __future__ import annotations

import itertools
import json
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable

import redis
from redis.exceptions import RedisError, WatchError

from frontdesk.core.exceptions import StoreUnavailableError, TicketConflictError, TicketNotFoundError
from frontdesk.escalation.normalizer import canonicalize, mentions
from frontdesk.models.knowledge import KnowledgeEntry
from frontdesk.models.ticket import Ticket, TicketStatus


def _encode_ticket(ticket: Ticket) -> dict[str, str]:
    fields = ticket.model_dump(mode="json", exclude_none=True)
    return {k: str(v) for k, v in fields.items()}


def _decode_ticket(raw: dict[str, str]) -> Ticket:
    return Ticket.model_validate(raw)


class RedisTicketStore:
    """Production ITicketStore backed by Redis."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "frontdesk") -> None:
        self._prefix = key_prefix
        self._client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

    def _ticket_key(self, ticket_id: str) -> str:
        return f"{self._prefix}:ticket:{ticket_id}"

    @property
    def _all_key(self) -> str:
        return f"{self._prefix}:tickets"

    @property
    def _pending_key(self) -> str:
        return f"{self._prefix}:tickets:pending"

    def _asker_key(self, asker_id: str) -> str:
        return f"{self._prefix}:tickets:pending:{asker_id}"

    def create(self, asker_id: str, question: str, now: datetime) -> Ticket:
        ticket = Ticket(id=uuid.uuid4().hex, asker_id=asker_id, question=question, created_at=now)
        score = now.timestamp()
        try:
            with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(self._ticket_key(ticket.id), mapping=_encode_ticket(ticket))
                pipe.zadd(self._all_key, {ticket.id: score})
                pipe.zadd(self._pending_key, {ticket.id: score})
                pipe.zadd(self._asker_key(asker_id), {ticket.id: score})
                pipe.execute()
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis create failed for asker={asker_id!r}: {exc}") from exc
        return ticket

    def get(self, ticket_id: str) -> Ticket | None:
        try:
            raw = self._client.hgetall(self._ticket_key(ticket_id))
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis GET failed for ticket={ticket_id!r}: {exc}") from exc
        return _decode_ticket(raw) if raw else None

    def list_pending(self, asker_id: str, limit: int = 5) -> list[Ticket]:
        tickets = self._load_range(self._asker_key(asker_id), limit)
        return [t for t in tickets if t.is_pending]

    def list_all(self, limit: int = 200) -> list[Ticket]:
        return self._load_range(self._all_key, limit)

    def resolve(self, ticket_id: str, answer: str, now: datetime) -> Ticket:
        return self._transition(ticket_id, lambda t: t.resolved(answer, now))

    def mark_unresolved(self, ticket_id: str, now: datetime) -> Ticket:
        return self._transition(ticket_id, lambda t: t.expired())

    def sweep_expired(self, now: datetime, deadline: timedelta) -> list[str]:
        cutoff = (now - deadline).timestamp()
        try:
            candidates = self._client.zrangebyscore(self._pending_key, "-inf", f"({cutoff}")
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis sweep scan failed: {exc}") from exc

        expired: list[str] = []
        for ticket_id in candidates:
            updated = self._transition(
                ticket_id,
                lambda t: t.expired() if now - t.created_at > deadline else None,
                strict=False,
            )
            if updated is not None:
                expired.append(ticket_id)
        return expired

    def _load_range(self, index_key: str, limit: int) -> list[Ticket]:
        try:
            ids = self._client.zrevrange(index_key, 0, limit - 1)
            with self._client.pipeline(transaction=False) as pipe:
                for ticket_id in ids:
                    pipe.hgetall(self._ticket_key(ticket_id))
                rows = pipe.execute()
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis range read failed for {index_key!r}: {exc}") from exc
        return [_decode_ticket(row) for row in rows if row]

    def _transition(self, ticket_id: str, change: Callable[[Ticket], Ticket | None],
                    strict: bool = True) -> Ticket | None:
        """Apply ``change`` to a pending ticket under WATCH.

        With ``strict=False`` a missing or terminal ticket (or a ``change``
        returning None) is skipped instead of raising.
        """
        key = self._ticket_key(ticket_id)
        try:
            with self._client.pipeline() as pipe:
                while True:
                    try:
                        pipe.watch(key)
                        raw = pipe.hgetall(key)
                        if not raw:
                            if strict:
                                raise TicketNotFoundError(ticket_id)
                            return None
                        current = _decode_ticket(raw)
                        if current.status != TicketStatus.PENDING:
                            if strict:
                                raise TicketConflictError(ticket_id, current.status)
                            return None
                        updated = change(current)
                        if updated is None:
                            return None
                        pipe.multi()
                        pipe.hset(key, mapping=_encode_ticket(updated))
                        pipe.zrem(self._pending_key, ticket_id)
                        pipe.zrem(self._asker_key(current.asker_id), ticket_id)
                        pipe.execute()
                        return updated
                    except WatchError:
                        continue
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis transition failed for ticket={ticket_id!r}: {exc}") from exc


class RedisKnowledgeStore:
    """Production IKnowledgeStore backed by a single Redis hash."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "frontdesk", scan_limit: int = 500) -> None:
        self._key = f"{key_prefix}:knowledge"
        self._scan_limit = scan_limit
        self._client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

    def lookup(self, question: str) -> str | None:
        key = canonicalize(question)
        try:
            exact = self._client.hget(self._key, key)
            if exact is not None:
                return json.loads(exact)["answer"]
            scanned = itertools.islice(self._client.hscan_iter(self._key), self._scan_limit)
            for field, value in scanned:
                if mentions(key, field):
                    return json.loads(value)["answer"]
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis knowledge lookup failed: {exc}") from exc
        return None

    def upsert(self, question: str, answer: str, now: datetime) -> KnowledgeEntry:
        entry = KnowledgeEntry(question=canonicalize(question), answer=answer, updated_at=now)
        payload: dict[str, Any] = {"answer": entry.answer, "updated_at": now.isoformat()}
        try:
            self._client.hset(self._key, entry.question, json.dumps(payload))
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis knowledge upsert failed: {exc}") from exc
        return entry

    def list(self, limit: int = 500) -> list[KnowledgeEntry]:
        try:
            rows = list(itertools.islice(self._client.hscan_iter(self._key), limit))
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis knowledge list failed: {exc}") from exc
        return [
            KnowledgeEntry(question=field, **json.loads(value))
            for field, value in rows
        ]
