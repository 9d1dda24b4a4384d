"""Shared test doubles: re-export memory backends, manual clock and sinks."""

from __future__ import annotations

from frontdesk.core.clock import ManualClock
from frontdesk.escalation.notifications import MemoryNotificationSink
from frontdesk.persistence.memory_backend import MemoryKnowledgeStore, MemoryTicketStore

__all__ = ["ManualClock", "MemoryKnowledgeStore", "MemoryNotificationSink", "MemoryTicketStore"]
