"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

from treatment_finder.constants import DEFAULT_TOP_N


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS — comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Catalog directory (None → CatalogStore default, which is v1/ from repo root)
    catalog_dir: str | None = None

    # Logging
    log_level: str = "INFO"

    # Number of recommendations on the results page
    top_n: int = DEFAULT_TOP_N

    # Idle sessions older than this are dropped when new sessions are created.
    # 0 means sessions live until deleted or the process restarts.
    session_ttl_minutes: int = 120


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        catalog_dir=os.getenv("SERVER_CATALOG_DIR") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        top_n=int(os.getenv("SERVER_TOP_N", str(DEFAULT_TOP_N))),
        session_ttl_minutes=int(os.getenv("SESSION_TTL_MINUTES", "120")),
    )
