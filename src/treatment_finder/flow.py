"""QuizFlow — the state machine that drives a treatment finder session.

Every transition is a pure function: it takes an :class:`AnswerSession`,
returns a new one, and never mutates its input.  Rejected transitions raise
:class:`InvalidTransition` and the caller keeps its previous session.

States:
    in progress  — ``0 <= cursor < question_count``
    complete     — ``cursor == question_count``

Transitions:
    select    single-select: replace the answer and advance
              multi-select:  toggle the answer, stay
    toggle    multi-select only: toggle the answer, stay
    advance   multi-select only, with at least one answer selected
    retreat   any state with ``cursor > 0``; leaves the complete state
    reset     back to an empty session
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import NoReturn

from treatment_finder.errors import InvalidTransition, SessionIncomplete
from treatment_finder.interfaces import Catalog
from treatment_finder.models.catalog import Question
from treatment_finder.models.session import (
    AnswerAction,
    AnswerSession,
    QuestionPayload,
    QuestionStep,
    QuizStep,
    ResultsStep,
    SessionSnapshot,
)
from treatment_finder.scoring import ScoringEngine

logger = logging.getLogger(__name__)


class QuizFlow:
    """Orchestrates session transitions and hands completed sessions to scoring.

    Args:
        catalog: any :class:`Catalog` implementation
        engine: scoring engine used by :meth:`current_step`; defaults to a
            :class:`ScoringEngine` over the same catalog
    """

    def __init__(self, catalog: Catalog, engine: ScoringEngine | None = None) -> None:
        self._catalog = catalog
        self._engine = engine or ScoringEngine(catalog)

    @property
    def engine(self) -> ScoringEngine:
        return self._engine

    @property
    def question_count(self) -> int:
        return len(self._catalog.get_questions())

    # ==================================================================
    # Session lifecycle
    # ==================================================================

    def start(self) -> AnswerSession:
        """Return an empty session positioned on the first question."""
        return AnswerSession()

    def reset(self, session: AnswerSession) -> AnswerSession:
        """Clear all answers and return to the first question."""
        return self.start()

    # ==================================================================
    # Answer transitions
    # ==================================================================

    def select(self, session: AnswerSession, question_id: str, answer_id: str) -> AnswerSession:
        """Record a selection on the current question.

        Single-select questions take ``{answer_id}`` as their answer and the
        cursor moves on immediately (completing the session after the last
        question).  Multi-select questions toggle ``answer_id`` instead and
        stay put until :meth:`advance`.

        Raises:
            InvalidTransition: if the session is complete, ``question_id`` is
                not the current question, or ``answer_id`` is not one of its
                answers.
        """
        question = self._check_selection(session, question_id, answer_id)

        if question.is_multiple:
            return self._toggled(session, question, answer_id)

        answers = dict(session.answers_given)
        answers[question.id] = (answer_id,)
        return self._moved(session, answers, session.cursor + 1)

    def toggle(self, session: AnswerSession, question_id: str, answer_id: str) -> AnswerSession:
        """Add ``answer_id`` to a multi-select answer set, or remove it if present.

        Raises:
            InvalidTransition: on a single-select question, or for the same
                reasons as :meth:`select`.
        """
        question = self._check_selection(session, question_id, answer_id)
        if not question.is_multiple:
            self._reject(f"Cannot toggle on single-select question '{question.id}'")
        return self._toggled(session, question, answer_id)

    def apply(self, session: AnswerSession, action: AnswerAction) -> AnswerSession:
        """Apply one interaction from the presentation layer."""
        if action.action == "toggle":
            return self.toggle(session, action.question_id, action.answer_id)
        return self.select(session, action.question_id, action.answer_id)

    # ==================================================================
    # Navigation transitions
    # ==================================================================

    def advance(self, session: AnswerSession) -> AnswerSession:
        """Confirm a multi-select question and move to the next one.

        Raises:
            InvalidTransition: if the session is complete, the current
                question is single-select (those advance on selection), or
                nothing is selected yet.
        """
        question = self._current_or_reject(session, "advance")
        if not question.is_multiple:
            self._reject(
                f"Cannot advance: question '{question.id}' is single-select "
                f"and advances on selection"
            )
        if not session.selected(question.id):
            self._reject(f"Cannot advance: no answer selected for '{question.id}'")
        return self._moved(session, dict(session.answers_given), session.cursor + 1)

    def retreat(self, session: AnswerSession) -> AnswerSession:
        """Step back one question, keeping the answers already given.

        Raises:
            InvalidTransition: if already on the first question.
        """
        if session.cursor <= 0:
            self._reject("Cannot retreat: already at the first question")
        return self._moved(session, dict(session.answers_given), session.cursor - 1)

    # ==================================================================
    # Read-only views
    # ==================================================================

    def current_question(self, session: AnswerSession) -> Question | None:
        """Return the question under the cursor, or None once complete."""
        if session.is_complete:
            return None
        return self._catalog.get_questions()[session.cursor]

    def current_step(self, session: AnswerSession) -> QuizStep:
        """Return what the presentation layer should show next.

        Complete sessions are scored here; in-progress sessions get the
        current question with its previous selection pre-filled.
        """
        question = self.current_question(session)
        if question is None:
            return ResultsStep(recommendations=self._engine.recommend(session))

        selected = list(session.selected(question.id))
        return QuestionStep(
            index=session.cursor,
            total=self.question_count,
            question=QuestionPayload.from_question(question),
            selected=selected,
            can_advance=question.is_multiple and bool(selected),
            can_retreat=session.cursor > 0,
        )

    def snapshot(
        self, session: AnswerSession, completed_at: datetime | None = None
    ) -> SessionSnapshot:
        """Build the lead-capture payload for a completed session.

        ``completed_at`` defaults to the current UTC time.

        Raises:
            SessionIncomplete: if the session has not passed the last question.
        """
        if not session.is_complete:
            raise SessionIncomplete(
                f"Cannot snapshot an incomplete session (cursor={session.cursor})"
            )
        return SessionSnapshot(
            answers_given={qid: list(ids) for qid, ids in session.answers_given.items()},
            completed_at=completed_at or datetime.now(timezone.utc),
        )

    # ==================================================================
    # Internal helpers
    # ==================================================================

    def _reject(self, message: str) -> NoReturn:
        logger.debug("Rejected transition: %s", message)
        raise InvalidTransition(message)

    def _current_or_reject(self, session: AnswerSession, operation: str) -> Question:
        question = self.current_question(session)
        if question is None:
            self._reject(f"Cannot {operation}: session is already complete")
        return question

    def _check_selection(
        self, session: AnswerSession, question_id: str, answer_id: str
    ) -> Question:
        """Validate that ``answer_id`` belongs to the current question."""
        question = self._current_or_reject(session, "select")
        if question.id != question_id:
            self._reject(
                f"Cannot select on '{question_id}': current question is '{question.id}'"
            )
        if question.get_answer(answer_id) is None:
            self._reject(f"Answer '{answer_id}' not found in question '{question.id}'")
        return question

    def _toggled(self, session: AnswerSession, question: Question, answer_id: str) -> AnswerSession:
        current = session.selected(question.id)
        if answer_id in current:
            updated = tuple(a for a in current if a != answer_id)
        else:
            updated = current + (answer_id,)

        answers = dict(session.answers_given)
        if updated:
            answers[question.id] = updated
        else:
            # An empty selection is stored as no entry at all
            answers.pop(question.id, None)
        return session.model_copy(update={"answers_given": answers})

    def _moved(
        self, session: AnswerSession, answers: dict[str, tuple[str, ...]], cursor: int
    ) -> AnswerSession:
        count = self.question_count
        cursor = max(0, min(cursor, count))
        return session.model_copy(
            update={
                "answers_given": answers,
                "cursor": cursor,
                "is_complete": cursor == count,
            }
        )
