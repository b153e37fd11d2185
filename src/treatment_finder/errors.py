"""Exceptions raised by the treatment finder SDK.

Caller-contract violations derive from ``ValueError`` (via ``QuizError``) so
that integrators who already map ``ValueError`` to a client error keep
working.  ``CatalogLoadFailure`` is a startup failure, not a ``ValueError``.
"""


class QuizError(ValueError):
    """Base class for errors caused by how the caller drives a session."""


class InvalidTransition(QuizError):
    """A flow operation was invoked in a state that does not permit it.

    The session passed in is left untouched; the caller is expected to
    re-present the same question.
    """


class SessionIncomplete(QuizError):
    """Recommendations or a snapshot were requested before the last question."""


class CatalogLoadFailure(RuntimeError):
    """The question/treatment catalog could not be loaded or is malformed."""
