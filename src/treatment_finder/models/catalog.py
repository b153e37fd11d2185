"""Pydantic models for the treatment finder catalog.

These models mirror the YAML files in ``v1/``:

  - Question: one quiz step with its ordered answers (questions.yaml)
  - Answer: a selectable option carrying semantic tags
  - Treatment: a recommendable service with tags and a base priority
    (treatments.yaml)

Only ``id``, ``tags``, ``selection_mode`` and ``priority`` matter to the
engine.  Display fields (prompt, text, name, price, ...) are carried through
untouched for the presentation layer.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Answer(BaseModel):
    """A selectable answer.  Empty ``tags`` make the answer scoring-neutral."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    tags: List[str] = []


class Question(BaseModel):
    """A quiz question.

    ``selection_mode`` decides how the flow reacts to a selection:
    ``single`` replaces the answer and advances immediately, ``multiple``
    toggles membership and waits for an explicit advance.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    prompt: str
    subtitle: Optional[str] = None
    selection_mode: Literal["single", "multiple"] = "single"
    answers: List[Answer] = Field(min_length=1)

    @model_validator(mode="after")
    def _unique_answer_ids(self):
        ids = [a.id for a in self.answers]
        if len(ids) != len(set(ids)):
            raise ValueError(f"duplicate answer ids in question '{self.id}'")
        return self

    @property
    def is_multiple(self) -> bool:
        return self.selection_mode == "multiple"

    def get_answer(self, answer_id: str) -> Optional[Answer]:
        """Return the answer with ``answer_id``, or None if the question has none."""
        for answer in self.answers:
            if answer.id == answer_id:
                return answer
        return None


class Treatment(BaseModel):
    """A recommendable treatment.

    ``priority`` is a catalog-authored baseline weight (1-10 by convention)
    used as a secondary ranking signal and tie-break.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    tags: List[str] = []
    priority: float = 0
    name: str = ""
    description: str = ""
    benefits: List[str] = []
    price: Optional[str] = None
    link: Optional[str] = None

    @property
    def tag_set(self) -> frozenset[str]:
        return frozenset(self.tags)
