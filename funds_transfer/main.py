"""Funds Transfer API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TransferEngineError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Services built once on startup via lifespan and kept on app.state.container

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - A container already present on app.state is left alone (tests inject their own)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from funds_transfer.api.error_handlers import register_error_handlers
from funds_transfer.api.routes import accounts, health, transfers
from funds_transfer.config import get_settings
from funds_transfer.container import build_container
from funds_transfer.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        app.state.container = build_container(settings)
    logger.info("Funds transfer API started")
    yield
    logger.info("Funds transfer API shutting down")
    if owns_container:
        await app.state.container.close()
        app.state.container = None


app = FastAPI(
    title="Funds Transfer API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(transfers.router)

register_error_handlers(app)
