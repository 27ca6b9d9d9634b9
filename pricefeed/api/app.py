"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection (shared across all
requests and the scheduler thread via ``request.app.state.db``), initialises
the schema, builds the pipeline runner and starts the daily scheduler.  On
shutdown it stops the scheduler and closes the connection.

Routers
-------
    /prices   - newest scraped prices
    /update   - manual pipeline trigger
    /health   - liveness and next scheduled run
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricefeed.config import settings
from pricefeed.db import get_connection, init_db
from pricefeed.pipeline import PipelineRunner, Scheduler

from pricefeed.api.routers import pipeline as pipeline_router
from pricefeed.api.routers import prices as prices_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the DB and start the scheduler on startup; undo both on shutdown."""
    conn = get_connection()
    init_db(conn)
    runner = PipelineRunner(conn, url=settings.scrape_url)
    scheduler = Scheduler(runner, cron=settings.scrape_cron, timezone=settings.scrape_timezone)

    app.state.db = conn
    app.state.runner = runner
    app.state.scheduler = scheduler

    if settings.scheduler_enabled:
        scheduler.start()
    else:
        logger.info("Scheduler disabled; scrapes run only via /update")
    try:
        yield
    finally:
        app.state.scheduler.stop()
        conn.close()
        logger.info("Database connection closed")


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Price Feed API",
        description=(
            "Scrapes the key-facts block of a public page on a daily schedule "
            "and serves the most recent price facts."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(prices_router.router, tags=["prices"])
    app.include_router(pipeline_router.router, tags=["pipeline"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn pricefeed.api.app:app
app = create_app()
