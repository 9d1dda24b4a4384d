"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import timedelta
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from frontdesk.api.routes import ask, health, knowledge, tickets
from frontdesk.core.clock import SystemClock
from frontdesk.core.config import AppSettings
from frontdesk.core.exceptions import (
    InvalidRequestError,
    StoreUnavailableError,
    TicketConflictError,
    TicketNotFoundError,
)
from frontdesk.core.log import configure_logging
from frontdesk.escalation.engine import EscalationEngine
from frontdesk.escalation.notifications import LoggingNotificationSink
from frontdesk.escalation.sweeper import TimeoutSweeper
from frontdesk.persistence import create_persistence
from frontdesk.persistence.seed import seed_knowledge

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire stores, engine and sweeper; run the sweeper until shutdown."""
    settings: AppSettings = app.state.settings
    configure_logging(settings.log_level)

    clock = SystemClock()
    notifier = LoggingNotificationSink()
    ticket_store, knowledge_store = create_persistence(settings)
    if settings.knowledge_seed_path:
        seed_knowledge(knowledge_store, settings.knowledge_seed_path, clock.now())

    app.state.engine = EscalationEngine(
        tickets=ticket_store,
        knowledge=knowledge_store,
        notifier=notifier,
        clock=clock,
        config=settings.escalation,
    )
    app.state.sweeper = TimeoutSweeper(
        ticket_store,
        clock,
        notifier,
        timeout=timedelta(seconds=settings.escalation.ticket_timeout_seconds),
        interval=settings.escalation.sweep_interval_seconds,
    )

    stop = asyncio.Event()
    task = asyncio.create_task(app.state.sweeper.run(stop))
    logger.info("FrontDesk started with %s storage", settings.storage_backend)
    try:
        yield
    finally:
        stop.set()
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task


def _error(status_code: int, code: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "detail": str(exc)})


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="FrontDesk HITL Escalation Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings or AppSettings()

    @app.exception_handler(TicketNotFoundError)
    async def _not_found(_: Request, exc: TicketNotFoundError) -> JSONResponse:
        return _error(404, "not_found", exc)

    @app.exception_handler(InvalidRequestError)
    async def _invalid(_: Request, exc: InvalidRequestError) -> JSONResponse:
        return _error(422, "validation_error", exc)

    @app.exception_handler(TicketConflictError)
    async def _conflict(_: Request, exc: TicketConflictError) -> JSONResponse:
        return _error(409, "conflict", exc)

    @app.exception_handler(StoreUnavailableError)
    async def _unavailable(_: Request, exc: StoreUnavailableError) -> JSONResponse:
        logger.error("Backing store unavailable: %s", exc)
        return _error(503, "unavailable", exc)

    app.include_router(health.router)
    app.include_router(ask.router, prefix="/api")
    app.include_router(tickets.router, prefix="/api")
    app.include_router(knowledge.router, prefix="/api")
    return app
