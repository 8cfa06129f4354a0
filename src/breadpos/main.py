# File: src/breadpos/main.py
"""FastAPI application factory for the bakery POS."""

import importlib
import os
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from breadpos.api.health import set_app_start_time
from breadpos.core.events import StockBroker
from breadpos.core.exception_handlers import register_exception_handlers
from breadpos.core.logging import configure_logging, get_logger
from breadpos.core.sentry import init_sentry
from breadpos.middleware.logging import RequestIDMiddleware
from breadpos.middleware.sentry import SentryContextMiddleware

configure_logging()
logger = get_logger(__name__)

# Include order is the order routes appear in the OpenAPI docs
ROUTER_MODULES = (
    "health",
    # staff and register sessions
    "auth",
    "staff",
    "shifts",
    "shift_inventory",
    # counter
    "sales",
    "discounts",
    "settings",
    # kitchen and stockroom
    "stock",
    "inventory",
    "catalog",
    # back office
    "imports",
    "receivables",
    "reports",
)

SESSION_MAX_AGE_SECONDS = 14 * 24 * 60 * 60


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    started = datetime.now()
    set_app_start_time(started)
    logger.info("app.startup", started_at=started.isoformat())

    yield

    logger.info("app.shutdown", stock_listeners=app.state.stock_broker.subscriber_count)


def _setup_middleware(app: FastAPI, environment: str, session_secret_key: str) -> None:
    # Last added runs first: request id, then the cookie session, then Sentry tags from it
    app.add_middleware(SentryContextMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret_key,
        max_age=SESSION_MAX_AGE_SECONDS,
        https_only=environment == "production",
        same_site="lax",
    )
    app.add_middleware(RequestIDMiddleware)


def _mount_static(app: FastAPI) -> None:
    """Serve the register front-end build when it ships next to the API."""
    static_dir = Path(os.getenv("STATIC_DIR", "static")).resolve()
    if not static_dir.exists():
        logger.warning("app.static_missing", static_dir=str(static_dir))
        return
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")


def _register_routers(app: FastAPI) -> None:
    for name in ROUTER_MODULES:
        module = importlib.import_module(f"breadpos.api.{name}")
        app.include_router(module.router)


def create_app() -> FastAPI:
    app = FastAPI(
        title="BreadPOS API",
        description="Bakery point of sale with shift cash and inventory reconciliation",
        version="0.1.0",
        lifespan=lifespan,
    )

    init_sentry()
    register_exception_handlers(app)

    # Live stock listeners for this process
    app.state.stock_broker = StockBroker()

    environment = os.getenv("ENVIRONMENT", "development")
    session_secret_key = os.getenv("SESSION_SECRET_KEY", "dev-secret-key-change-in-production")
    if environment == "production" and session_secret_key.startswith("dev-"):
        logger.warning("app.insecure_session_key", message="SESSION_SECRET_KEY is not set in production")

    _setup_middleware(app, environment, session_secret_key)
    _mount_static(app)
    _register_routers(app)

    logger.info("app.configured", environment=environment, routers=len(ROUTER_MODULES))
    return app


def run() -> None:
    """Development server entrypoint (``breadpos`` console script)."""
    uvicorn.run(
        "breadpos.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
