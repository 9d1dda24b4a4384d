"""Unit tests for the DynamoDB stores using moto."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import boto3
import pytest
from moto import mock_aws

from frontdesk.core.exceptions import StoreUnavailableError
from frontdesk.models.ticket import TicketStatus
from frontdesk.persistence.dynamodb_backend import (
    KNOWLEDGE_TABLE,
    TICKETS_TABLE,
    DynamoDBKnowledgeStore,
    DynamoDBTicketStore,
    create_tables,
)

TABLE_SUFFIX = "-test"
REGION = "us-east-1"
T0 = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def aws():
    with mock_aws():
        ddb = boto3.resource("dynamodb", region_name=REGION)
        create_tables(ddb, suffix=TABLE_SUFFIX)
        yield ddb


@pytest.fixture
def store(aws):
    return DynamoDBTicketStore(table_suffix=TABLE_SUFFIX, region=REGION)


class TestCreateTables:
    def test_creates_both_tables(self, aws):
        tables = aws.meta.client.list_tables()["TableNames"]
        assert f"{TICKETS_TABLE}{TABLE_SUFFIX}" in tables
        assert f"{KNOWLEDGE_TABLE}{TABLE_SUFFIX}" in tables

    def test_idempotent_skips_existing(self, aws):
        assert create_tables(aws, suffix=TABLE_SUFFIX) == []


class TestItemLayout:
    def test_ticket_item_carries_index_keys(self, store, aws):
        ticket = store.create("c1", "q", T0)
        item = aws.Table(f"{TICKETS_TABLE}{TABLE_SUFFIX}").get_item(Key={"id": ticket.id})["Item"]
        assert item["asker_status"] == "c1#pending"
        assert item["status"] == "pending"
        assert float(item["created_ts"]) == T0.timestamp()

    def test_resolve_moves_asker_index_key(self, store, aws):
        ticket = store.create("c1", "q", T0)
        store.resolve(ticket.id, "a", T0 + timedelta(seconds=5))
        item = aws.Table(f"{TICKETS_TABLE}{TABLE_SUFFIX}").get_item(Key={"id": ticket.id})["Item"]
        assert item["asker_status"] == "c1#resolved"
        assert item["answer"] == "a"

    def test_sweep_skips_concurrently_resolved_ticket(self, store, aws):
        ticket = store.create("c1", "q", T0)
        # Resolved between scan and update: the conditional write must lose.
        assert store._conditional_update(ticket.resolved("a", T0)) is not None
        assert store._conditional_update(ticket.expired()) is None
        assert store.get(ticket.id).status == TicketStatus.RESOLVED


class TestUnavailable:
    def test_missing_table_surfaces_as_unavailable(self):
        with mock_aws():
            store = DynamoDBTicketStore(table_suffix="-absent", region=REGION)
            with pytest.raises(StoreUnavailableError):
                store.get("t1")

    def test_knowledge_missing_table_surfaces_as_unavailable(self):
        with mock_aws():
            store = DynamoDBKnowledgeStore(table_suffix="-absent", region=REGION)
            with pytest.raises(StoreUnavailableError):
                store.lookup("what are your hours")
