"""Public model re-exports for treatment_finder.

Consumers should import from ``treatment_finder.models`` rather than
reaching into sub-modules directly.
"""

# --- Catalog ---
from treatment_finder.models.catalog import Answer, Question, Treatment

# --- Session / step / contracts ---
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

__all__ = [
    # Catalog
    "Answer",
    "Question",
    "Treatment",
    # Session
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
]
