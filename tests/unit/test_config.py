"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

from frontdesk.core.config import AppSettings, EscalationConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.storage_backend == "memory"
    assert settings.knowledge_seed_path is None


def test_escalation_config_defaults():
    config = EscalationConfig()
    assert config.dedup_window_seconds == 60
    assert config.pending_scan_limit == 5
    assert config.knowledge_scan_limit == 500
    assert config.ticket_timeout_seconds == 600
    assert config.sweep_interval_seconds == 30
    assert config.ticket_list_limit == 200


def test_escalation_env_override(monkeypatch):
    monkeypatch.setenv("FRONTDESK_ESCALATION_DEDUP_WINDOW_SECONDS", "15")
    monkeypatch.setenv("FRONTDESK_ESCALATION_TICKET_TIMEOUT_SECONDS", "120")
    config = EscalationConfig()
    assert config.dedup_window_seconds == 15
    assert config.ticket_timeout_seconds == 120


def test_storage_backend_env_override(monkeypatch):
    monkeypatch.setenv("FRONTDESK_STORAGE_BACKEND", "redis")
    assert AppSettings().storage_backend == "redis"
