"""Result endpoints — recommendations, session snapshot, and lead hand-off.

All three require a completed session and return 409 otherwise.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from treatment_finder.constants import LEAD_SOURCE
from treatment_finder.flow import QuizFlow
from treatment_finder.interfaces import LeadSink
from treatment_finder.models.session import Lead, Recommendation, SessionSnapshot

from treatment_finder_server.dependencies import (
    get_flow,
    get_lead_sink,
    get_registry,
    get_visitor_id,
)
from treatment_finder_server.registry import SessionRegistry

router = APIRouter(tags=["results"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class LeadRequest(BaseModel):
    """Body for POST /sessions/{session_id}/lead."""
    name: str
    email: str
    phone: str | None = None


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/sessions/{session_id}/recommendations")
async def get_recommendations(
    session_id: str,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
) -> list[Recommendation]:
    """Return the ranked recommendations for a completed session."""
    return flow.engine.recommend(registry.get(visitor_id, session_id))


@router.get("/sessions/{session_id}/snapshot")
async def get_snapshot(
    session_id: str,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionSnapshot:
    """Return the lead-capture payload ``{answersGiven, completedAt}``."""
    return flow.snapshot(
        registry.get(visitor_id, session_id),
        completed_at=registry.completed_at(visitor_id, session_id),
    )


@router.post("/sessions/{session_id}/lead", status_code=202)
async def submit_lead(
    session_id: str,
    body: LeadRequest,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
    sink: LeadSink = Depends(get_lead_sink),
) -> dict:
    """Hand the visitor's contact details and quiz outcome to the lead sink."""
    session = registry.get(visitor_id, session_id)
    lead = Lead(
        name=body.name,
        email=body.email,
        phone=body.phone,
        source=LEAD_SOURCE,
        snapshot=flow.snapshot(
            session, completed_at=registry.completed_at(visitor_id, session_id)
        ),
        recommendations=flow.engine.recommend(session),
    )
    await sink.submit(lead)
    return {"status": "accepted"}
