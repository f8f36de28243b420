"""
To-Do List API - Main Application
=================================

FastAPI application entry point with middleware configuration
and route registration.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import newrelic.agent

# Configure logging for the application (root logger defaults to WARNING)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from todolist.config import settings
from todolist.core.errors import setup_exception_handlers
from todolist.core.middleware import PRINCIPAL_STATE_KEY, AuthenticationMiddleware
from todolist.db.session import close_db, init_db
from todolist.services.cache import close_redis, init_redis
from todolist.services.purge_scheduler import PurgeScheduler

logger = logging.getLogger(__name__)


# =============================================================================
# New Relic Transaction Enrichment Middleware (Raw ASGI)
# =============================================================================

class NewRelicTransactionMiddleware:
    """
    Raw ASGI middleware that enriches every New Relic transaction with
    custom attributes for filtering, alerting and dashboarding.

    Uses raw ASGI instead of BaseHTTPMiddleware so the route handler runs
    in the same task and New Relic's contextvars-based span propagation
    keeps the DB and Redis child spans attached.

    Captures: response status, latency, HTTP method, route pattern, and
    the principal's email (when authenticated).
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
                # Route pattern (e.g. "/api/tasks/{task_id}") for grouping
                route = scope.get("route")
                route_path = route.path if route else scope.get("path", "unknown")

                client = scope.get("client")
                client_ip = client[0] if client else "unknown"

                newrelic.agent.add_custom_attributes([
                    ("http.method", scope.get("method", "")),
                    ("http.route", route_path),
                    ("http.status_code", status_code),
                    ("http.duration_ms", round(duration_ms, 2)),
                    ("http.client_ip", client_ip),
                    ("environment", settings.ENVIRONMENT),
                ])

                # Attach the principal set by AuthenticationMiddleware
                state = scope.get("state") or {}
                principal = state.get(PRINCIPAL_STATE_KEY)
                if principal is not None and not principal.is_anonymous:
                    newrelic.agent.add_custom_attribute("enduser.id", principal.name)


_purge_scheduler: PurgeScheduler | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events for:
    - Database connection
    - Redis connection (when configured)
    - Daily purge of soft-deleted tasks
    """
    global _purge_scheduler

    # Startup
    logger.info("Starting To-Do List API...")

    # Initialize database
    try:
        await init_db()
    except Exception as e:
        logger.warning("Database connection failed: %s", e)
        # Continue startup even if DB fails (for health checks)

    # Initialize Redis
    if settings.cache_enabled:
        try:
            await init_redis()
        except Exception as e:
            logger.warning("Redis connection failed: %s", e)

    # Start the retention purge timer
    if settings.TASK_PURGE_ENABLED:
        _purge_scheduler = PurgeScheduler()
        await _purge_scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down To-Do List API...")
    if _purge_scheduler is not None:
        await _purge_scheduler.stop()
        _purge_scheduler = None
    await close_db()
    await close_redis()


# Create FastAPI application
app = FastAPI(
    title="To-Do List API",
    description="""
## To-Do List Application Backend

A multi-user task list API.

### Features
- **Authentication**: Email/password registration and login with JWT bearer tokens
- **Tasks**: Create, list, update and delete your own tasks
- **Soft delete**: Deleted tasks can be restored until the retention window
  (30 days by default) has passed; a daily job then removes them for good
    """,
    version="1.0.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
    lifespan=lifespan,
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "Resource not found"},
        409: {"description": "Resource conflict"},
        400: {"description": "Validation error"},
        500: {"description": "Internal server error"},
    },
)

# Bearer token → request principal
app.add_middleware(AuthenticationMiddleware)

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

@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns the current status of the API.
    """
    return {
        "status": "healthy",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/", tags=["Health"])
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "To-Do List API",
        "version": "1.0.0",
        "docs": "/docs" if settings.is_development else "Disabled in production",
    }


# =============================================================================
# API Routes
# =============================================================================

from todolist.api.v1 import auth
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])

from todolist.api.v1 import tasks
app.include_router(tasks.router, prefix="/api/tasks", tags=["Tasks"])
