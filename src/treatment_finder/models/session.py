"""Session and step models — the contract between the flow and its callers.

``AnswerSession`` is an immutable value: every flow transition returns a new
instance, so a caller can keep the previous value around (undo, retries,
speculative scoring) without copying.

Step types:
  - QuestionStep: present the current question to the visitor
  - ResultsStep: the quiz is complete and carries ranked recommendations

The ``QuizStep`` union covers both cases so callers can dispatch on ``type``.

The wire contracts (``AnswerAction``, ``Recommendation``, ``SessionSnapshot``)
serialise with camelCase keys and accept either spelling on input.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from treatment_finder.models.catalog import Question


class _ContractModel(BaseModel):
    """Base for models exchanged with the presentation layer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

class AnswerSession(BaseModel):
    """Answers given so far plus the position in the question sequence.

    ``answers_given`` maps question id to the selected answer ids.  Entries
    have set semantics but keep selection order so two sessions built by the
    same operations serialise identically.  Questions with no selection have
    no entry at all.
    """

    model_config = ConfigDict(frozen=True)

    answers_given: dict[str, tuple[str, ...]] = {}
    cursor: int = 0
    is_complete: bool = False

    def selected(self, question_id: str) -> tuple[str, ...]:
        return self.answers_given.get(question_id, ())


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------

class AnswerAction(_ContractModel):
    """A single visitor interaction: pick (or toggle) an answer."""

    question_id: str
    answer_id: str
    action: Literal["select", "toggle"] = "select"


class Recommendation(_ContractModel):
    """One ranked treatment.  ``rank`` is 1-based."""

    treatment_id: str
    score: float
    rank: int


class SessionSnapshot(_ContractModel):
    """Opaque payload handed to lead capture once the quiz is complete."""

    answers_given: dict[str, list[str]]
    completed_at: datetime


class Lead(_ContractModel):
    """Contact details captured on the results page, with the quiz outcome."""

    name: str
    email: str
    phone: str | None = None
    source: str
    snapshot: SessionSnapshot
    recommendations: list[Recommendation]


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

class AnswerOption(BaseModel):
    """An answer as shown to the visitor: id and label, no tags."""

    id: str
    label: str


class QuestionPayload(BaseModel):
    """Flattened question for API consumers.

    Strips answer tags so the presentation layer never sees scoring data.
    """

    question_id: str
    prompt: str
    subtitle: str | None = None
    selection_mode: str
    # In catalog order
    options: list[AnswerOption]

    @classmethod
    def from_question(cls, question: Question) -> "QuestionPayload":
        return cls(
            question_id=question.id,
            prompt=question.prompt,
            subtitle=question.subtitle,
            selection_mode=question.selection_mode,
            options=[AnswerOption(id=a.id, label=a.text) for a in question.answers],
        )


class QuestionStep(BaseModel):
    """Flow step: show the question at ``index`` (0-based) of ``total``."""

    type: Literal["question"] = "question"
    index: int
    total: int
    question: QuestionPayload
    selected: list[str] = []
    can_advance: bool = False
    can_retreat: bool = False


class ResultsStep(BaseModel):
    """Flow step: every question answered; recommendations are ready."""

    type: Literal["results"] = "results"
    recommendations: list[Recommendation]


# Callers can match on step.type to dispatch rendering logic.
QuizStep = QuestionStep | ResultsStep
