"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the schema, opens the classifier HTTP client
    and starts availability polling once
  - CORS middleware
  - Global exception handlers (SDK errors → 422/503/409/410/404/400)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``healthsurvey-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from healthsurvey_core.client import SubmissionClient
from healthsurvey_core.errors import (
    ServiceUnavailableError,
    SessionClosedError,
    SubmissionInProgressError,
    ValidationError,
)
from healthsurvey_core.monitor import AvailabilityMonitor
from healthsurvey_core.schema import SchemaStore

from healthsurvey_server.config import ServerSettings, load_settings
from healthsurvey_server.errors import (
    generic_error_handler,
    key_error_handler,
    service_unavailable_handler,
    session_closed_handler,
    submission_in_progress_handler,
    validation_error_handler,
    value_error_handler,
)
from healthsurvey_server.registry import SessionRegistry
from healthsurvey_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan — runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load the schema table into a ``SchemaStore``
      2. Open the classifier ``httpx.AsyncClient``
      3. Activate the ``AvailabilityMonitor`` (first probe runs here)
      4. Stash store, monitor and session registry on ``app.state``

    Shutdown:
      1. Close every open session
      2. Stop polling, then close the HTTP client
    """
    settings: ServerSettings = app.state.settings

    # --- Load schema ---
    store = SchemaStore(settings.schema_path)
    store.load()

    # --- Classifier client + monitor ---
    http = httpx.AsyncClient(
        base_url=settings.survey_endpoint,
        timeout=settings.request_timeout,
        transport=app.state.transport,
    )
    monitor = AvailabilityMonitor(http, interval=settings.poll_interval)
    client = SubmissionClient(http, monitor)
    await monitor.activate()
    logger.info("Classifier endpoint %s is %s", settings.survey_endpoint, monitor.state.value)

    app.state.store = store
    app.state.monitor = monitor
    app.state.registry = SessionRegistry(
        store, monitor, client, ttl_seconds=settings.session_ttl_seconds,
    )

    yield

    # --- Shutdown ---
    app.state.registry.close_all()
    await monitor.deactivate()
    await http.aclose()
    logger.info("Classifier client closed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(
    settings: ServerSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build and return the configured FastAPI application.

    ``transport`` replaces the network transport of the classifier client
    (e.g. ``httpx.MockTransport`` in tests).
    """
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Health Survey API Server",
        description="REST API for the multi-step health survey and prediction submission",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Read by the lifespan handler
    app.state.settings = settings
    app.state.transport = transport

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ServiceUnavailableError, service_unavailable_handler)
    app.add_exception_handler(SubmissionInProgressError, submission_in_progress_handler)
    app.add_exception_handler(SessionClosedError, session_closed_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — reports the classifier availability alongside."""
        monitor: AvailabilityMonitor = app.state.monitor
        return {"status": "ok", "classifier": monitor.state.value}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn healthsurvey_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``healthsurvey-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "healthsurvey_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
