"""
Subscription API - Main Application
===================================

FastAPI application entry point with middleware configuration
and route registration.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import newrelic.agent

from app.config import settings

# Configure logging for the application (root logger defaults to WARNING)
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.db.session import init_db, close_db
from app.core.errors import setup_exception_handlers
from app.schemas.common import HealthResponse
from app.utils.helpers import format_datetime, utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# New Relic Transaction Enrichment Middleware (Raw ASGI)
# =============================================================================

class NewRelicTransactionMiddleware:
    """
    Raw ASGI middleware that enriches every New Relic transaction with
    custom attributes for filtering and alerting.

    Raw ASGI keeps the handler in the same task, so New Relic's
    contextvars-based span propagation keeps working.

    Captures: response status, latency, HTTP method and route pattern.
    Does nothing when the agent is not running.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500  # default until we capture the real one

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000

            txn = newrelic.agent.current_transaction()
            if txn:
                route = scope.get("route")
                route_path = route.path if route else scope.get("path", "unknown")

                newrelic.agent.add_custom_attributes([
                    ("http.method", scope.get("method", "")),
                    ("http.route", route_path),
                    ("http.status_code", status_code),
                    ("http.duration_ms", round(duration_ms, 2)),
                    ("environment", settings.ENVIRONMENT),
                ])


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Opens the shared database engine on startup and disposes it on
    shutdown.
    """
    logger.info("Starting Subscription API on port %d", settings.PORT)

    try:
        await init_db()
    except Exception as e:
        # Continue startup even if DB fails (for health checks)
        logger.warning("Database connection failed: %s", e)

    yield

    logger.info("Shutting down Subscription API")
    await close_db()


# Create FastAPI application
app = FastAPI(
    title="Subscription API",
    description="""
## In-app purchase backend

- **Receipt verification**: validates a purchase receipt (mocked) and
  marks the user premium
- **App Store webhook**: receives server-to-server subscription notifications
    """,
    version="1.0.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
    lifespan=lifespan,
    responses={
        400: {"description": "Validation error"},
        500: {"description": "Internal server error"},
    },
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# New Relic transaction enrichment (adds custom attrs to every transaction)
app.add_middleware(NewRelicTransactionMiddleware)

# Setup exception handlers
setup_exception_handlers(app)


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get("/health", tags=["Health"], response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(status="ok", timestamp=format_datetime(utc_now()))


# =============================================================================
# API Routes
# =============================================================================

from app.api.v1 import verify_receipt, webhooks
app.include_router(verify_receipt.router, prefix="/api", tags=["Receipts"])
app.include_router(webhooks.router, prefix="/webhook", tags=["Webhooks"])


def run() -> None:
    """Serve the application with uvicorn on ``PORT``."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
