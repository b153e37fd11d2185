"""FastAPI dependency injection — provides the flow, catalog, registry, and visitor identity.

Shared objects are built once in the lifespan handler and stashed on
``app.state``; these helpers hand them to the routes.
"""

from fastapi import Header, HTTPException, Request

from treatment_finder.catalog import CatalogStore
from treatment_finder.flow import QuizFlow
from treatment_finder.interfaces import LeadSink

from treatment_finder_server.registry import SessionRegistry


# ------------------------------------------------------------------
# Flow, catalog & registry — stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_flow(request: Request) -> QuizFlow:
    """Return the QuizFlow singleton from ``app.state``."""
    return request.app.state.flow


def get_store(request: Request) -> CatalogStore:
    """Return the CatalogStore singleton from ``app.state``."""
    return request.app.state.store


def get_registry(request: Request) -> SessionRegistry:
    """Return the SessionRegistry singleton from ``app.state``."""
    return request.app.state.registry


def get_lead_sink(request: Request) -> LeadSink:
    """Return the configured LeadSink from ``app.state``."""
    return request.app.state.lead_sink


# ------------------------------------------------------------------
# Visitor identity — extracted from the X-Visitor-ID header
# ------------------------------------------------------------------

async def get_visitor_id(
    x_visitor_id: str | None = Header(None, alias="X-Visitor-ID"),
) -> str:
    """Extract the anonymous visitor identity from the ``X-Visitor-ID`` header.

    Returns 401 if the header is missing — every session endpoint is scoped
    to a visitor.
    """
    if not x_visitor_id:
        raise HTTPException(status_code=401, detail="X-Visitor-ID header is required")
    return x_visitor_id
