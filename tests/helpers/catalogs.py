"""Synthetic catalogs for engine and flow tests.

Built in memory through ``CatalogStore.from_models`` so tests never depend
on production content.
"""

from pathlib import Path

from treatment_finder.catalog import CatalogStore
from treatment_finder.models.catalog import Answer, Question, Treatment

# Production catalog shipped with the repo
CATALOG_DIR = Path(__file__).resolve().parents[2] / "v1"


def question(qid: str, answers: dict[str, list[str]], *, multiple: bool = False) -> Question:
    """Shorthand: ``answers`` maps answer id to its tags."""
    return Question(
        id=qid,
        prompt=f"Question {qid}?",
        selection_mode="multiple" if multiple else "single",
        answers=[Answer(id=aid, text=aid, tags=tags) for aid, tags in answers.items()],
    )


def treatment(tid: str, tags: list[str], priority: float = 5) -> Treatment:
    return Treatment(id=tid, name=tid.title(), tags=tags, priority=priority)


def example_catalog() -> CatalogStore:
    """Two single-select questions and two treatments (the worked example).

    Selecting ``fatigue`` then ``wellness-goal`` scores A at 3.9 and B at 2.5.
    """
    return CatalogStore.from_models(
        [
            question("q1", {"fatigue": ["energy"], "none": []}),
            question("q2", {"wellness-goal": ["wellness", "energy"], "skip": []}),
        ],
        [
            treatment("A", ["energy", "wellness"], priority=9),
            treatment("B", ["energy"], priority=5),
        ],
        version="example",
    )


def mixed_catalog() -> CatalogStore:
    """single → multiple → single, with one empty-tag answer."""
    return CatalogStore.from_models(
        [
            question("first", {"a1": ["x"], "a2": ["y"]}),
            question("many", {"m1": ["x"], "m2": ["z"], "m3": []}, multiple=True),
            question("last", {"s1": ["z"], "s2": ["x", "y"]}),
        ],
        [
            treatment("tx", ["x"], priority=2),
            treatment("ty", ["y"], priority=4),
            treatment("tz", ["z"], priority=6),
        ],
        version="mixed",
    )
