"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from frontdesk.core.config import AppSettings
from frontdesk.core.protocols import IKnowledgeStore, ITicketStore


def create_persistence(settings: AppSettings | None = None) -> tuple[ITicketStore, IKnowledgeStore]:
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (ticket_store, knowledge_store).
    """
    if settings is None:
        settings = AppSettings()
    scan_limit = settings.escalation.knowledge_scan_limit

    if settings.storage_backend == "redis":
        from frontdesk.persistence.redis_backend import RedisKnowledgeStore, RedisTicketStore

        redis_kwargs = {
            "host": settings.redis.host,
            "port": settings.redis.port,
            "db": settings.redis.db,
            "key_prefix": settings.redis.key_prefix,
        }
        return RedisTicketStore(**redis_kwargs), RedisKnowledgeStore(scan_limit=scan_limit, **redis_kwargs)

    if settings.storage_backend == "dynamodb":
        from frontdesk.persistence.dynamodb_backend import DynamoDBKnowledgeStore, DynamoDBTicketStore

        ddb_kwargs = {
            "table_suffix": settings.dynamodb.table_suffix,
            "region": settings.dynamodb.region,
            "endpoint_url": settings.dynamodb.endpoint_url,
        }
        return DynamoDBTicketStore(**ddb_kwargs), DynamoDBKnowledgeStore(scan_limit=scan_limit, **ddb_kwargs)

    from frontdesk.persistence.memory_backend import MemoryKnowledgeStore, MemoryTicketStore

    return MemoryTicketStore(), MemoryKnowledgeStore(scan_limit=scan_limit)
