"""treatment_finder — Tag-overlap treatment recommendation SDK.

Public API:
    QuizFlow          — state machine driving a quiz session (select/advance/retreat/reset)
    ScoringEngine     — ranks treatments for a completed session
    CatalogStore      — loads the YAML catalog into typed models with lookup helpers
    AnswerSession     — immutable session value passed through every transition
    QuizStep          — union type returned by QuizFlow.current_step
    QuestionStep      — step: present the current question
    ResultsStep       — step: quiz complete, ranked recommendations

Contracts:
    AnswerAction      — input: {questionId, answerId, action}
    Recommendation    — output: {treatmentId, score, rank}
    SessionSnapshot   — hand-off: {answersGiven, completedAt}
    Lead              — contact details plus snapshot, for a LeadSink

Interfaces:
    Catalog           — ABC for question/treatment sources
    LeadSink          — ABC for the lead-capture collaborator

Errors:
    InvalidTransition, SessionIncomplete, CatalogLoadFailure
"""

from treatment_finder.catalog import CatalogStore
from treatment_finder.errors import (
    CatalogLoadFailure,
    InvalidTransition,
    QuizError,
    SessionIncomplete,
)
from treatment_finder.flow import QuizFlow
from treatment_finder.interfaces import Catalog, LeadSink
from treatment_finder.models.catalog import Answer, Question, Treatment
from treatment_finder.models.session import (
    AnswerAction,
    AnswerOption,
    AnswerSession,
    Lead,
    QuestionPayload,
    QuestionStep,
    QuizStep,
    Recommendation,
    ResultsStep,
    SessionSnapshot,
)
from treatment_finder.scoring import ScoringEngine

__all__ = [
    # Flow, scoring & catalog
    "CatalogStore",
    "QuizFlow",
    "ScoringEngine",
    # Catalog models
    "Answer",
    "Question",
    "Treatment",
    # Session / step
    "AnswerOption",
    "AnswerSession",
    "QuestionPayload",
    "QuestionStep",
    "QuizStep",
    "ResultsStep",
    # Contracts
    "AnswerAction",
    "Lead",
    "Recommendation",
    "SessionSnapshot",
    # Interfaces
    "Catalog",
    "LeadSink",
    # Errors
    "CatalogLoadFailure",
    "InvalidTransition",
    "QuizError",
    "SessionIncomplete",
]
