"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the catalog and builds the quiz flow once
  - CORS middleware
  - Global exception handlers (flow errors → 409, registry errors → 404/409)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``treatment-finder-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from treatment_finder.catalog import CatalogStore
from treatment_finder.errors import InvalidTransition, SessionIncomplete
from treatment_finder.flow import QuizFlow
from treatment_finder.interfaces import LeadSink
from treatment_finder.scoring import ScoringEngine

from treatment_finder_server.config import ServerSettings, load_settings
from treatment_finder_server.errors import (
    generic_error_handler,
    invalid_transition_handler,
    session_incomplete_handler,
    value_error_handler,
)
from treatment_finder_server.leads import LoggingLeadSink
from treatment_finder_server.registry import SessionRegistry
from treatment_finder_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan — runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup.

    Startup:
      1. Load the YAML catalog into a ``CatalogStore`` — a
         ``CatalogLoadFailure`` here aborts startup
      2. Build ``ScoringEngine`` and ``QuizFlow``
      3. Stash them on ``app.state`` with a fresh ``SessionRegistry``
    """
    settings: ServerSettings = app.state.settings

    # --- Load catalog ---
    store = CatalogStore(catalog_dir=settings.catalog_dir)
    store.load()

    # --- Build flow ---
    engine = ScoringEngine(store, top_n=settings.top_n)
    flow = QuizFlow(store, engine)

    app.state.store = store
    app.state.flow = flow
    app.state.registry = SessionRegistry(ttl_minutes=settings.session_ttl_minutes)

    yield

    logger.info("Shutting down with %d live sessions", len(app.state.registry))


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(
    settings: ServerSettings | None = None,
    lead_sink: LeadSink | None = None,
) -> FastAPI:
    """Build and return the configured FastAPI application.

    ``lead_sink`` defaults to :class:`LoggingLeadSink`.
    """
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Treatment Finder API",
        description="REST API for the treatment finder quiz",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler can read them
    app.state.settings = settings
    app.state.lead_sink = lead_sink or LoggingLeadSink()

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(InvalidTransition, invalid_transition_handler)
    app.add_exception_handler(SessionIncomplete, session_incomplete_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health(request: Request) -> dict:
        """Readiness probe — reports the loaded catalog."""
        store: CatalogStore = request.app.state.store
        return {
            "status": "ok",
            "catalog": store.version,
            "questions": store.question_count,
            "treatments": len(store.get_treatments()),
        }

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn treatment_finder_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``treatment-finder-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "treatment_finder_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
