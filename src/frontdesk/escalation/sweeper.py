"""TimeoutSweeper: expires pending tickets nobody answered in time."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Awaitable, Callable

from frontdesk.core.exceptions import StoreUnavailableError
from frontdesk.core.protocols import IClock, INotificationSink, ITicketStore

logger = logging.getLogger(__name__)

Wait = Callable[[float], Awaitable[None]]


class TimeoutSweeper:
    """Periodic task moving stale pending tickets to unresolved.

    ``tick()`` performs one sweep and can be called directly with a manual
    clock. ``run()`` repeats ticks every ``interval`` until ``stop`` is set;
    the wait between ticks is injectable so tests do not sleep.
    """

    def __init__(
        self,
        tickets: ITicketStore,
        clock: IClock,
        notifier: INotificationSink,
        *,
        timeout: timedelta = timedelta(minutes=10),
        interval: float = 30.0,
        wait: Wait | None = None,
    ) -> None:
        self._tickets = tickets
        self._clock = clock
        self._notifier = notifier
        self._timeout = timeout
        self._interval = interval
        self._wait = wait or asyncio.sleep
        self.ticks = 0

    def tick(self) -> list[str]:
        """Run one sweep. Store outages are logged and retried next tick."""
        self.ticks += 1
        try:
            expired = self._tickets.sweep_expired(self._clock.now(), self._timeout)
        except StoreUnavailableError:
            logger.exception("Timeout sweep failed; retrying in %.0fs", self._interval)
            return []

        for ticket_id in expired:
            logger.info("[Timeout] Ticket %s marked unresolved", ticket_id)
            try:
                self._notifier.ticket_timed_out(ticket_id)
            except Exception:
                logger.exception("Timeout notification failed for ticket %s", ticket_id)
        return expired

    async def run(self, stop: asyncio.Event) -> None:
        logger.info("Timeout sweeper started (interval=%.0fs, timeout=%s)", self._interval, self._timeout)
        while not stop.is_set():
            await self._wait(self._interval)
            if stop.is_set():
                break
            try:
                await asyncio.to_thread(self.tick)
            except Exception:
                logger.exception("Timeout sweep crashed; retrying in %.0fs", self._interval)
        logger.info("Timeout sweeper stopped after %d ticks", self.ticks)
