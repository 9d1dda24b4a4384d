"""DynamoDB backends implementing ITicketStore and IKnowledgeStore."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from frontdesk.core.exceptions import StoreUnavailableError, TicketConflictError, TicketNotFoundError
from frontdesk.escalation.normalizer import canonicalize, mentions
from frontdesk.models.knowledge import KnowledgeEntry
from frontdesk.models.ticket import Ticket, TicketStatus

TICKETS_TABLE = "frontdesk-tickets"
KNOWLEDGE_TABLE = "frontdesk-knowledge"
ASKER_STATUS_INDEX = "asker-status-index"
STATUS_INDEX = "status-index"

TABLE_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": TICKETS_TABLE,
        "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
        "AttributeDefinitions": [
            {"AttributeName": "id", "AttributeType": "S"},
            {"AttributeName": "asker_status", "AttributeType": "S"},
            {"AttributeName": "status", "AttributeType": "S"},
            {"AttributeName": "created_ts", "AttributeType": "N"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": ASKER_STATUS_INDEX,
                "KeySchema": [
                    {"AttributeName": "asker_status", "KeyType": "HASH"},
                    {"AttributeName": "created_ts", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
            {
                "IndexName": STATUS_INDEX,
                "KeySchema": [
                    {"AttributeName": "status", "KeyType": "HASH"},
                    {"AttributeName": "created_ts", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
    },
    {
        "name": KNOWLEDGE_TABLE,
        "KeySchema": [{"AttributeName": "question", "KeyType": "HASH"}],
        "AttributeDefinitions": [{"AttributeName": "question", "AttributeType": "S"}],
    },
]


def create_tables(ddb: Any, suffix: str = "") -> list[str]:
    """Create the ticket and knowledge tables. Skips tables that already exist."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])
    created: list[str] = []
    for defn in TABLE_DEFINITIONS:
        table_name = f"{defn['name']}{suffix}"
        if table_name in existing:
            continue
        kwargs = {k: v for k, v in defn.items() if k != "name"}
        client.create_table(TableName=table_name, BillingMode="PAY_PER_REQUEST", **kwargs)
        created.append(table_name)
    return created


def _asker_status(asker_id: str, status: str) -> str:
    return f"{asker_id}#{status}"


def _timestamp(value: datetime) -> Decimal:
    return Decimal(str(value.timestamp()))


def _encode_ticket(ticket: Ticket) -> dict[str, Any]:
    item = ticket.model_dump(mode="json", exclude_none=True)
    item["asker_status"] = _asker_status(ticket.asker_id, ticket.status)
    item["created_ts"] = _timestamp(ticket.created_at)
    return item


def _decode_ticket(item: dict[str, Any]) -> Ticket:
    fields = ("id", "asker_id", "question", "status", "created_at", "answer", "resolved_at")
    return Ticket.model_validate({k: item[k] for k in fields if k in item})


def _boto_call(action: str, fn, *args: Any, **kwargs: Any) -> Any:
    try:
        return fn(*args, **kwargs)
    except (ClientError, BotoCoreError) as exc:
        raise StoreUnavailableError(f"DynamoDB {action} failed: {exc}") from exc


class _DynamoDBBase:
    def __init__(self, table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, base: str):
        return self._ddb.Table(f"{base}{self._table_suffix}")


class DynamoDBTicketStore(_DynamoDBBase):
    """Production ITicketStore; transitions are conditional writes on status."""

    def create(self, asker_id: str, question: str, now: datetime) -> Ticket:
        ticket = Ticket(id=uuid.uuid4().hex, asker_id=asker_id, question=question, created_at=now)
        _boto_call("put_item", self._table(TICKETS_TABLE).put_item, Item=_encode_ticket(ticket))
        return ticket

    def get(self, ticket_id: str) -> Ticket | None:
        resp = _boto_call("get_item", self._table(TICKETS_TABLE).get_item, Key={"id": ticket_id})
        item = resp.get("Item")
        return _decode_ticket(item) if item else None

    def list_pending(self, asker_id: str, limit: int = 5) -> list[Ticket]:
        resp = _boto_call(
            "query", self._table(TICKETS_TABLE).query,
            IndexName=ASKER_STATUS_INDEX,
            KeyConditionExpression=Key("asker_status").eq(_asker_status(asker_id, TicketStatus.PENDING)),
            ScanIndexForward=False,
            Limit=limit,
        )
        return [_decode_ticket(item) for item in resp.get("Items", [])]

    def list_all(self, limit: int = 200) -> list[Ticket]:
        tickets: list[Ticket] = []
        for status in TicketStatus:
            resp = _boto_call(
                "query", self._table(TICKETS_TABLE).query,
                IndexName=STATUS_INDEX,
                KeyConditionExpression=Key("status").eq(status.value),
                ScanIndexForward=False,
                Limit=limit,
            )
            tickets.extend(_decode_ticket(item) for item in resp.get("Items", []))
        tickets.sort(key=lambda t: t.created_at, reverse=True)
        return tickets[:limit]

    def resolve(self, ticket_id: str, answer: str, now: datetime) -> Ticket:
        current = self._require(ticket_id)
        updated = self._conditional_update(current.resolved(answer, now))
        if updated is None:
            raise self._conflict(ticket_id)
        return updated

    def mark_unresolved(self, ticket_id: str, now: datetime) -> Ticket:
        current = self._require(ticket_id)
        updated = self._conditional_update(current.expired())
        if updated is None:
            raise self._conflict(ticket_id)
        return updated

    def sweep_expired(self, now: datetime, deadline: timedelta) -> list[str]:
        cutoff = _timestamp(now - deadline)
        expired: list[str] = []
        for item in self._pending_before(cutoff):
            ticket = _decode_ticket(item)
            if now - ticket.created_at <= deadline:
                continue
            if self._conditional_update(ticket.expired()) is not None:
                expired.append(ticket.id)
        return expired

    def _pending_before(self, cutoff: Decimal):
        kwargs: dict[str, Any] = {
            "IndexName": STATUS_INDEX,
            "KeyConditionExpression": Key("status").eq(TicketStatus.PENDING.value) & Key("created_ts").lt(cutoff),
        }
        while True:
            resp = _boto_call("query", self._table(TICKETS_TABLE).query, **kwargs)
            yield from resp.get("Items", [])
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return
            kwargs["ExclusiveStartKey"] = last_key

    def _require(self, ticket_id: str) -> Ticket:
        ticket = self.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        if not ticket.is_pending:
            raise TicketConflictError(ticket_id, ticket.status)
        return ticket

    def _conflict(self, ticket_id: str) -> Exception:
        current = self.get(ticket_id)
        if current is None:
            return TicketNotFoundError(ticket_id)
        return TicketConflictError(ticket_id, current.status)

    def _conditional_update(self, updated: Ticket) -> Ticket | None:
        """Write ``updated`` only if the stored ticket is still pending.

        Returns None when another writer committed first.
        """
        item = _encode_ticket(updated)
        changed = [k for k in ("status", "asker_status", "answer", "resolved_at") if k in item]
        names = {f"#{k}": k for k in changed} | {"#id": "id"}
        values: dict[str, Any] = {f":{k}": item[k] for k in changed}
        values[":pending"] = TicketStatus.PENDING.value
        try:
            self._table(TICKETS_TABLE).update_item(
                Key={"id": updated.id},
                UpdateExpression="SET " + ", ".join(f"#{k} = :{k}" for k in changed),
                ConditionExpression="attribute_exists(#id) AND #status = :pending",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return None
            raise StoreUnavailableError(f"DynamoDB update_item failed for {updated.id!r}: {exc}") from exc
        except BotoCoreError as exc:
            raise StoreUnavailableError(f"DynamoDB update_item failed for {updated.id!r}: {exc}") from exc
        return updated


class DynamoDBKnowledgeStore(_DynamoDBBase):
    """Production IKnowledgeStore keyed by canonical question."""

    def __init__(self, table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None, scan_limit: int = 500) -> None:
        super().__init__(table_suffix=table_suffix, region=region, endpoint_url=endpoint_url)
        self._scan_limit = scan_limit

    def lookup(self, question: str) -> str | None:
        key = canonicalize(question)
        resp = _boto_call("get_item", self._table(KNOWLEDGE_TABLE).get_item, Key={"question": key})
        if "Item" in resp:
            return resp["Item"]["answer"]
        for item in self._scan(self._scan_limit):
            if mentions(key, item["question"]):
                return item["answer"]
        return None

    def upsert(self, question: str, answer: str, now: datetime) -> KnowledgeEntry:
        entry = KnowledgeEntry(question=canonicalize(question), answer=answer, updated_at=now)
        _boto_call(
            "put_item", self._table(KNOWLEDGE_TABLE).put_item,
            Item=entry.model_dump(mode="json"),
        )
        return entry

    def list(self, limit: int = 500) -> list[KnowledgeEntry]:
        return [KnowledgeEntry.model_validate(item) for item in self._scan(limit)]

    def _scan(self, limit: int):
        kwargs: dict[str, Any] = {}
        remaining = limit
        while remaining > 0:
            resp = _boto_call("scan", self._table(KNOWLEDGE_TABLE).scan, Limit=remaining, **kwargs)
            items = resp.get("Items", [])
            yield from items
            remaining -= len(items)
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return
            kwargs["ExclusiveStartKey"] = last_key
