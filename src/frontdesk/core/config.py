"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class EscalationConfig(BaseSettings):
    """Escalation engine timings and scan bounds."""

    model_config = {"env_prefix": "FRONTDESK_ESCALATION_"}

    dedup_window_seconds: float = 60.0
    pending_scan_limit: int = 5
    knowledge_scan_limit: int = 500
    ticket_timeout_seconds: float = 600.0  # 10 minutes
    sweep_interval_seconds: float = 30.0
    ticket_list_limit: int = 200
    knowledge_list_limit: int = 500


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "FRONTDESK_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis store configuration."""

    model_config = {"env_prefix": "FRONTDESK_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key_prefix: str = "frontdesk"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "FRONTDESK_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    storage_backend: Literal["memory", "redis", "dynamodb"] = "memory"
    knowledge_seed_path: str | None = None

    escalation: EscalationConfig = EscalationConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
