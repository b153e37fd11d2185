"""Step endpoints — drive a quiz session one interaction at a time.

Every endpoint returns the step to render next: a ``question`` step while
the quiz is in progress, or a ``results`` step with recommendations once the
last question is answered.  Rejected interactions return 409 and leave the
session unchanged.
"""

from fastapi import APIRouter, Depends

from treatment_finder.flow import QuizFlow
from treatment_finder.models.session import AnswerAction, QuizStep

from treatment_finder_server.dependencies import get_flow, get_registry, get_visitor_id
from treatment_finder_server.registry import SessionRegistry

router = APIRouter(tags=["steps"])


@router.get("/sessions/{session_id}/step")
async def get_current_step(
    session_id: str,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
) -> QuizStep:
    """Return the current step without changing the session."""
    return flow.current_step(registry.get(visitor_id, session_id))


@router.post("/sessions/{session_id}/step")
async def submit_answer(
    session_id: str,
    body: AnswerAction,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
) -> QuizStep:
    """Select (or toggle) an answer on the current question.

    Single-select answers advance to the next question immediately.
    """
    session = flow.apply(registry.get(visitor_id, session_id), body)
    registry.save(visitor_id, session_id, session)
    return flow.current_step(session)


@router.post("/sessions/{session_id}/advance")
async def advance(
    session_id: str,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
) -> QuizStep:
    """Confirm the current multi-select question and move on."""
    session = flow.advance(registry.get(visitor_id, session_id))
    registry.save(visitor_id, session_id, session)
    return flow.current_step(session)


@router.post("/sessions/{session_id}/retreat")
async def retreat(
    session_id: str,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
) -> QuizStep:
    """Go back one question; previous answers are pre-selected."""
    session = flow.retreat(registry.get(visitor_id, session_id))
    registry.save(visitor_id, session_id, session)
    return flow.current_step(session)


@router.post("/sessions/{session_id}/reset")
async def reset(
    session_id: str,
    visitor_id: str = Depends(get_visitor_id),
    flow: QuizFlow = Depends(get_flow),
    registry: SessionRegistry = Depends(get_registry),
) -> QuizStep:
    """Clear every answer and return to the first question."""
    session = flow.reset(registry.get(visitor_id, session_id))
    registry.save(visitor_id, session_id, session)
    return flow.current_step(session)
