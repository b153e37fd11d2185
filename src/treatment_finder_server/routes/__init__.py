"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from treatment_finder_server.routes.catalog import router as catalog_router
from treatment_finder_server.routes.results import router as results_router
from treatment_finder_server.routes.sessions import router as sessions_router
from treatment_finder_server.routes.steps import router as steps_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(sessions_router, prefix=API_PREFIX)
    app.include_router(steps_router, prefix=API_PREFIX)
    app.include_router(results_router, prefix=API_PREFIX)
    app.include_router(catalog_router, prefix=API_PREFIX)
