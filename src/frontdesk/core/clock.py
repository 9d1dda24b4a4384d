"""Clock implementations: wall clock for production, manual clock for tests."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta


class SystemClock:
    """IClock backed by the system wall clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class ManualClock:
    """IClock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, seconds: float = 0.0, **kwargs: float) -> datetime:
        """Move the clock forward; accepts the same keywords as timedelta."""
        with self._lock:
            self._now += timedelta(seconds=seconds, **kwargs)
            return self._now
