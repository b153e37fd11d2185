"""CatalogStore — loads the quiz catalog from ``v1/`` into typed models.

This is the single source of truth for questions and treatments at runtime.
The store is loaded once at startup and never mutated afterwards; any
problem with the catalog raises :class:`CatalogLoadFailure` so the process
fails fast instead of serving a broken quiz.

Usage::

    store = CatalogStore()          # defaults to the packaged v1/ catalog
    store.load()                    # parse questions.yaml + treatments.yaml

    questions = store.get_questions()
    q = store.get_question("concerns")
"""

from __future__ import annotations

import logging
from importlib.resources import files
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from pydantic import ValidationError

from treatment_finder.constants import DEFAULT_CATALOG_VERSION
from treatment_finder.errors import CatalogLoadFailure
from treatment_finder.interfaces import Catalog
from treatment_finder.models.catalog import Question, Treatment

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def default_catalog_dir() -> Path:
    """Return the catalog directory shipped with the package.

    Installed wheels carry the catalog as ``treatment_finder/v1``; source
    checkouts keep it at the repo root.
    """
    packaged = files("treatment_finder").joinpath(DEFAULT_CATALOG_VERSION)
    if packaged.is_dir():
        return Path(str(packaged))
    return find_repo_root() / DEFAULT_CATALOG_VERSION


# ---------------------------------------------------------------------------
# CatalogStore
# ---------------------------------------------------------------------------

class CatalogStore(Catalog):
    """Loads ``questions.yaml`` and ``treatments.yaml`` and provides typed lookup.

    Attributes populated after :meth:`load`:

        questions   — list[Question] in presentation order
        treatments  — list[Treatment] in declaration order
    """

    def __init__(self, catalog_dir: str | Path | None = None) -> None:
        if catalog_dir is None:
            catalog_dir = default_catalog_dir()
        self._base = Path(catalog_dir)

        # Populated by load()
        self.questions: list[Question] = []
        self.treatments: list[Treatment] = []

        self._question_index: dict[str, int] = {}
        self._treatments_by_id: dict[str, Treatment] = {}

    @classmethod
    def from_models(
        cls,
        questions: Iterable[Question],
        treatments: Iterable[Treatment],
        *,
        version: str = "inline",
    ) -> CatalogStore:
        """Build a store from in-memory models (compiled-in or synthetic catalogs).

        Runs the same validation as :meth:`load`.
        """
        store = cls(catalog_dir=version)
        store._install(list(questions), list(treatments))
        return store

    @property
    def version(self) -> str:
        """Catalog version label — the name of the directory it was loaded from."""
        return self._base.name

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse both YAML files under the catalog directory into typed models.

        Call this once at startup.

        Raises:
            CatalogLoadFailure: if a file is missing, unparsable, fails schema
                validation, or breaks a catalog invariant.
        """
        try:
            raw_questions = load_yaml(self._base / "questions.yaml")
            raw_treatments = load_yaml(self._base / "treatments.yaml")
        except (OSError, yaml.YAMLError) as exc:
            raise CatalogLoadFailure(f"Cannot read catalog {self._base}: {exc}") from exc

        if not isinstance(raw_questions, list) or not isinstance(raw_treatments, list):
            raise CatalogLoadFailure(
                f"Catalog {self._base}: questions.yaml and treatments.yaml must be lists"
            )

        try:
            questions = [Question(**raw) for raw in raw_questions]
            treatments = [Treatment(**raw) for raw in raw_treatments]
        except (TypeError, ValidationError) as exc:
            raise CatalogLoadFailure(f"Invalid catalog entry in {self._base}: {exc}") from exc

        self._install(questions, treatments)

    def _install(self, questions: list[Question], treatments: list[Treatment]) -> None:
        """Check catalog invariants, then index and publish the models."""
        if not questions:
            raise CatalogLoadFailure(f"Catalog {self.version} has no questions")

        question_index: dict[str, int] = {}
        for i, q in enumerate(questions):
            if q.id in question_index:
                raise CatalogLoadFailure(f"Duplicate question id '{q.id}' in catalog {self.version}")
            question_index[q.id] = i

        treatments_by_id: dict[str, Treatment] = {}
        for t in treatments:
            if t.id in treatments_by_id:
                raise CatalogLoadFailure(f"Duplicate treatment id '{t.id}' in catalog {self.version}")
            treatments_by_id[t.id] = t

        self.questions = questions
        self.treatments = treatments
        self._question_index = question_index
        self._treatments_by_id = treatments_by_id

        logger.info(
            "CatalogStore loaded %s: %d questions, %d answers, %d treatments",
            self.version,
            len(questions),
            sum(len(q.answers) for q in questions),
            len(treatments),
        )
        for warning in self.lint():
            logger.warning("Catalog %s: %s", self.version, warning)

    # ------------------------------------------------------------------
    # Catalog interface
    # ------------------------------------------------------------------

    def get_questions(self) -> list[Question]:
        return self.questions

    def get_treatments(self) -> list[Treatment]:
        return self.treatments

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def get_question(self, question_id: str) -> Question:
        """Look up a question by id.

        Raises:
            KeyError: if the question is not in the catalog.
        """
        return self.questions[self._question_index[question_id]]

    def index_of(self, question_id: str) -> int:
        """Return the 0-based presentation index of a question.

        Raises:
            KeyError: if the question is not in the catalog.
        """
        return self._question_index[question_id]

    def get_treatment(self, treatment_id: str) -> Treatment:
        """Look up a treatment by id.

        Raises:
            KeyError: if the treatment is not in the catalog.
        """
        return self._treatments_by_id[treatment_id]

    # ------------------------------------------------------------------
    # Authoring checks
    # ------------------------------------------------------------------

    def lint(self) -> list[str]:
        """Return catalog-authoring warnings.

        None of these stop the quiz from running:
          - a treatment without tags can only surface through its priority
          - an answer without tags never moves the ranking
          - an answer tag carried by no treatment never matches anything
        """
        warnings: list[str] = []
        treatment_tags: set[str] = set()
        for t in self.treatments:
            treatment_tags.update(t.tags)
            if not t.tags:
                warnings.append(f"treatment '{t.id}' has no tags and ranks on priority only")

        for q in self.questions:
            for a in q.answers:
                if not a.tags:
                    warnings.append(f"answer '{q.id}/{a.id}' has no tags")
                    continue
                dead = sorted(set(a.tags) - treatment_tags)
                if dead:
                    warnings.append(
                        f"answer '{q.id}/{a.id}' has tags no treatment carries: {', '.join(dead)}"
                    )
        return warnings
