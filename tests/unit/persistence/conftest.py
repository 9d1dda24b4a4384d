"""Store fixtures parametrized over every backend (memory, fakeredis, moto)."""

from __future__ import annotations

from unittest.mock import patch

import boto3
import fakeredis
import pytest
from moto import mock_aws

from frontdesk.persistence.dynamodb_backend import DynamoDBKnowledgeStore, DynamoDBTicketStore, create_tables
from frontdesk.persistence.memory_backend import MemoryKnowledgeStore, MemoryTicketStore
from frontdesk.persistence.redis_backend import RedisKnowledgeStore, RedisTicketStore

TABLE_SUFFIX = "-test"
REGION = "us-east-1"
BACKENDS = ["memory", "redis", "dynamodb"]


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def aws():
    with mock_aws():
        ddb = boto3.resource("dynamodb", region_name=REGION)
        create_tables(ddb, suffix=TABLE_SUFFIX)
        yield ddb


def _redis_patch(fake_server):
    return patch(
        "redis.Redis",
        side_effect=lambda **_: fakeredis.FakeRedis(server=fake_server, decode_responses=True),
    )


@pytest.fixture(params=BACKENDS)
def ticket_store(request, fake_server):
    if request.param == "memory":
        yield MemoryTicketStore()
    elif request.param == "redis":
        with _redis_patch(fake_server):
            store = RedisTicketStore(key_prefix="test")
        yield store
    else:
        request.getfixturevalue("aws")
        yield DynamoDBTicketStore(table_suffix=TABLE_SUFFIX, region=REGION)


@pytest.fixture(params=BACKENDS)
def knowledge_store(request, fake_server):
    if request.param == "memory":
        yield MemoryKnowledgeStore(scan_limit=500)
    elif request.param == "redis":
        with _redis_patch(fake_server):
            store = RedisKnowledgeStore(key_prefix="test", scan_limit=500)
        yield store
    else:
        request.getfixturevalue("aws")
        yield DynamoDBKnowledgeStore(table_suffix=TABLE_SUFFIX, region=REGION, scan_limit=500)
