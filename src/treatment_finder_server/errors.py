"""Global exception handlers — map SDK exceptions to HTTP status codes.

Flow violations (``InvalidTransition``, ``SessionIncomplete``) become 409s
so the client re-presents the current step.  Other ``ValueError``s are
inspected by message, as raised by the session registry.  Rather than
catching these in every route, handlers are installed once on the app.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from treatment_finder.errors import InvalidTransition, SessionIncomplete

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    # Session already exists for this (visitor_id, session_id)
    ("already exists", 409),
    # Session not found
    ("not found", 404),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (visitor_id, session_id) stay in the server log; the
# client receives only a generic description.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Resource already exists",
    400: "Invalid request",
}


async def invalid_transition_handler(request: Request, exc: InvalidTransition) -> JSONResponse:
    """Map ``InvalidTransition`` to 409 — the current step should be re-presented."""
    logger.info("InvalidTransition at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=409,
        content={"detail": "Action not allowed at this step", "error": "invalid_transition"},
    )


async def session_incomplete_handler(request: Request, exc: SessionIncomplete) -> JSONResponse:
    """Map ``SessionIncomplete`` to 409 — results need every question answered."""
    logger.info("SessionIncomplete at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=409,
        content={"detail": "Quiz is not complete", "error": "session_incomplete"},
    )


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map remaining ``ValueError``s to 404 / 409 / 400 by message.

    The raw exception message is logged server-side but never sent to the
    client.
    """
    msg = str(exc)
    status = 400  # default
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
