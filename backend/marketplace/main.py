"""Marketplace API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MarketplaceError -> {"error", "code"} JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, seed catalog and chain client initialized in the lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Chain client kept on app.state: one connection pool per process, closed on shutdown

Run with::

    uvicorn marketplace.main:app --app-dir backend --port 3001
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from marketplace.api.error_handlers import register_error_handlers
from marketplace.api.routes import balance, health, items, purchase
from marketplace.config import get_settings
from marketplace.infrastructure.chain_client import ChainBalanceClient
from marketplace.infrastructure.database import init_db
from marketplace.infrastructure.observability import setup_logging
from marketplace.services.catalog_service import seed_default_catalog

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.auto_create_schema:
        await manager.create_schema()
    if settings.seed_catalog:
        async with manager.session() as db:
            await seed_default_catalog(db, settings)

    chain_client = None
    if settings.balance_lookup_enabled:
        chain_client = ChainBalanceClient(
            settings.chain_rpc_url,
            timeout_seconds=settings.chain_rpc_timeout_seconds,
            max_retries=settings.chain_rpc_max_retries,
            base_delay_ms=settings.chain_rpc_base_delay_ms,
            max_delay_ms=settings.chain_rpc_max_delay_ms,
        )
    app.state.chain_client = chain_client

    logger.info("Marketplace API started")
    yield
    logger.info("Marketplace API shutting down")

    if chain_client is not None:
        await chain_client.aclose()
    await manager.dispose()


app = FastAPI(
    title="Sports Marketplace API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 1)
    logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


# Routes — explicit registration
app.include_router(health.router)
app.include_router(items.router)
app.include_router(balance.router)
app.include_router(purchase.router)

register_error_handlers(app)
