"""Session management endpoints — create, get, delete quiz sessions.

All endpoints require the ``X-Visitor-ID`` header.  Session identity is the
(visitor_id, session_id) pair.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from treatment_finder.flow import QuizFlow

from treatment_finder_server.dependencies import get_flow, get_registry, get_visitor_id
from treatment_finder_server.registry import SessionInfo, SessionRegistry

router = APIRouter(tags=["sessions"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class CreateSessionRequest(BaseModel):
    """Body for POST /sessions."""
    session_id: str


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions", status_code=201)
async def create_session(
    body: CreateSessionRequest,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionInfo:
    """Start a new quiz session on the first question.

    Returns 201 on success.  Raises 409 if the visitor already has a
    session with the same id.
    """
    return registry.create(visitor_id, body.session_id, flow.start())


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    visitor_id: str = Depends(get_visitor_id),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionInfo:
    """Get session info.  Raises 404 if the session does not exist."""
    return registry.info(visitor_id, session_id)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    visitor_id: str = Depends(get_visitor_id),
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    """Discard a session.  Returns 204, or 404 if it does not exist."""
    registry.delete(visitor_id, session_id)
