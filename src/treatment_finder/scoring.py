"""ScoringEngine — turns a completed answer session into ranked treatments.

Scoring is a pure tag-overlap count:

  1. Every tag of every selected answer goes into one flat multiset.  A tag
     selected through two different answers is counted twice, so repeated
     signals weigh more.
  2. A treatment's match score is the number of multiset entries it carries.
  3. The final score adds ``priority / PRIORITY_SCALE`` as a baseline bonus.
  4. Treatments are stably sorted by final score, descending, so catalog
     declaration order breaks ties.

The engine holds no mutable state; the same session and catalog always give
the same ranking.
"""

from __future__ import annotations

import logging
from typing import Iterable

from treatment_finder.constants import DEFAULT_TOP_N, PRIORITY_SCALE
from treatment_finder.errors import SessionIncomplete
from treatment_finder.interfaces import Catalog
from treatment_finder.models.catalog import Question, Treatment
from treatment_finder.models.session import AnswerSession, Recommendation

logger = logging.getLogger(__name__)


def collect_tags(session: AnswerSession, questions: Iterable[Question]) -> list[str]:
    """Flatten the tags of every selected answer into a multiset.

    Iterates questions in presentation order, then selected answers in the
    order they were picked.  Answer ids unknown to the catalog are skipped.
    """
    tags: list[str] = []
    for question in questions:
        for answer_id in session.selected(question.id):
            answer = question.get_answer(answer_id)
            if answer is None:
                logger.debug("Skipping unknown answer %s/%s", question.id, answer_id)
                continue
            tags.extend(answer.tags)
    return tags


def match_score(tags: Iterable[str], treatment: Treatment) -> int:
    """Count multiset entries that are members of the treatment's tags."""
    carried = treatment.tag_set
    return sum(1 for tag in tags if tag in carried)


def final_score(tags: list[str], treatment: Treatment) -> float:
    return match_score(tags, treatment) + treatment.priority / PRIORITY_SCALE


class ScoringEngine:
    """Ranks the catalog's treatments for a completed session.

    Args:
        catalog: any :class:`Catalog` implementation
        top_n: how many recommendations :meth:`recommend` returns
    """

    def __init__(self, catalog: Catalog, top_n: int = DEFAULT_TOP_N) -> None:
        if top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {top_n}")
        self._catalog = catalog
        self.top_n = top_n

    def rank_all(self, session: AnswerSession) -> list[Recommendation]:
        """Score and rank every treatment in the catalog.

        Raises:
            SessionIncomplete: if the session has not passed the last question.
        """
        if not session.is_complete:
            raise SessionIncomplete(
                f"Cannot score an incomplete session (cursor={session.cursor})"
            )

        tags = collect_tags(session, self._catalog.get_questions())
        scored = [(final_score(tags, t), t) for t in self._catalog.get_treatments()]
        # sorted() is stable: equal scores keep catalog order
        ranked = sorted(scored, key=lambda pair: pair[0], reverse=True)

        return [
            Recommendation(treatment_id=t.id, score=score, rank=i)
            for i, (score, t) in enumerate(ranked, 1)
        ]

    def recommend(self, session: AnswerSession) -> list[Recommendation]:
        """Return the top ``top_n`` treatments, or all of them if fewer exist."""
        recommendations = self.rank_all(session)[: self.top_n]
        logger.debug(
            "Recommended %s",
            ", ".join(f"{r.treatment_id}={r.score:g}" for r in recommendations),
        )
        return recommendations
