#!/usr/bin/env python3
"""Simulate a treatment finder quiz end-to-end against the SDK.

Walks every question of the catalog through ``QuizFlow``, printing each
question, the answer chosen, and the ranked recommendations at the end.

By default answers are **randomised** (``--random``, on by default) so each
run explores a different profile.  Use ``--no-random`` to always pick the
first answer of every question.

Usage::

    # Default run (random answers, production catalog)
    python scripts/simulate_quiz.py

    # Deterministic run
    python scripts/simulate_quiz.py --no-random

    # Reproducible random run, showing every scored treatment
    python scripts/simulate_quiz.py --seed 42 --all

    # Report catalog authoring warnings and exit
    python scripts/simulate_quiz.py --lint

    # Use another catalog directory
    python scripts/simulate_quiz.py --catalog-dir path/to/v2
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path so the script runs from a plain checkout.
# ---------------------------------------------------------------------------
_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from treatment_finder.catalog import CatalogStore  # noqa: E402
from treatment_finder.errors import CatalogLoadFailure  # noqa: E402
from treatment_finder.flow import QuizFlow  # noqa: E402
from treatment_finder.models.catalog import Question  # noqa: E402
from treatment_finder.models.session import AnswerSession  # noqa: E402
from treatment_finder.scoring import ScoringEngine, collect_tags  # noqa: E402

_DOUBLE_LINE = "=" * 62
_SINGLE_LINE = "-" * 62

# Set from CLI flags in main().
_quiet = False


def _print(*args, **kwargs) -> None:
    """Print wrapper that respects the --quiet flag."""
    if not _quiet:
        print(*args, **kwargs)


def log_question(index: int, total: int, question: Question) -> None:
    _print(f"\n{_SINGLE_LINE}")
    mode = "pick any" if question.is_multiple else "pick one"
    _print(f" Q{index + 1}/{total}: {question.prompt} ({mode})")
    if question.subtitle:
        _print(f"   {question.subtitle}")
    _print(_SINGLE_LINE)
    for a in question.answers:
        _print(f"   [{a.id}] {a.text}")


def log_selection(question: Question, answer_ids: list[str]) -> None:
    for aid in answer_ids:
        answer = question.get_answer(aid)
        tags = ", ".join(answer.tags) if answer and answer.tags else "(no tags)"
        _print(f"   -> {aid}  tags: {tags}")


def choose_answers(question: Question, rng: random.Random | None) -> list[str]:
    """Pick answer ids for one question.

    Deterministic mode picks the first answer.  Random mode picks one answer
    for single-select questions and 1-3 for multi-select ones.
    """
    ids = [a.id for a in question.answers]
    if rng is None:
        return ids[:1]
    if not question.is_multiple:
        return [rng.choice(ids)]
    k = rng.randint(1, min(3, len(ids)))
    return rng.sample(ids, k)


def run_simulation(
    store: CatalogStore,
    rng: random.Random | None,
    top_n: int | None,
) -> AnswerSession:
    """Answer every question, then print the results page."""
    engine = ScoringEngine(store, top_n=top_n) if top_n else ScoringEngine(store)
    flow = QuizFlow(store, engine)
    questions = store.get_questions()

    _print(_DOUBLE_LINE)
    _print(" TREATMENT FINDER SIMULATION")
    _print(f" Catalog: {store.version} ({len(questions)} questions, "
           f"{len(store.get_treatments())} treatments)")
    _print(f" Random:  {'ON' if rng else 'OFF'}")
    _print(_DOUBLE_LINE)

    session = flow.start()
    while not session.is_complete:
        question = flow.current_question(session)
        log_question(session.cursor, len(questions), question)

        chosen = choose_answers(question, rng)
        log_selection(question, chosen)
        for aid in chosen:
            session = flow.select(session, question.id, aid)
        if question.is_multiple:
            session = flow.advance(session)

    tags = collect_tags(session, questions)
    _print(f"\n{_DOUBLE_LINE}")
    _print(" RESULTS")
    _print(_DOUBLE_LINE)
    _print(f" Tag multiset ({len(tags)}): {', '.join(tags) or '(empty)'}")
    _print()
    for rec in engine.recommend(session):
        t = store.get_treatment(rec.treatment_id)
        _print(f"  {rec.rank}. {t.name:<28s} score={rec.score:5.2f}  {t.price}")
    return session


def print_ranking(store: CatalogStore, session: AnswerSession) -> None:
    """Print every treatment with its score, in ranked order."""
    _print(f"\n{_SINGLE_LINE}")
    _print(" Full ranking")
    _print(_SINGLE_LINE)
    for rec in ScoringEngine(store).rank_all(session):
        _print(f"  {rec.rank:2d}. {rec.treatment_id:<20s} {rec.score:5.2f}")


def main() -> None:
    global _quiet

    parser = argparse.ArgumentParser(
        description="Simulate a treatment finder quiz against the SDK.",
    )
    parser.add_argument(
        "--catalog-dir",
        default=None,
        help="Catalog directory (default: v1/ at the repo root)",
    )
    parser.add_argument(
        "--random",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Randomise answers (default: on). Use --no-random for deterministic mode.",
    )
    parser.add_argument(
        "--seed",
        type=int, default=None,
        help="RNG seed for reproducible random runs",
    )
    parser.add_argument(
        "-n", "--top-n",
        type=int, default=None,
        help="Number of recommendations to show (default: TREATMENT_FINDER_TOP_N or 4)",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Also print the score of every treatment",
    )
    parser.add_argument(
        "--lint",
        action="store_true",
        help="Print catalog authoring warnings and exit",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all print output (exit code still reflects success/failure)",
    )
    args = parser.parse_args()
    _quiet = args.quiet

    logging.basicConfig(
        level=logging.CRITICAL if args.quiet else logging.WARNING,
        format="%(levelname)s [%(name)s] %(message)s",
    )

    store = CatalogStore(args.catalog_dir)
    try:
        store.load()
    except CatalogLoadFailure as exc:
        # Always print errors regardless of --quiet
        print(f"Error: {exc}")
        sys.exit(1)

    if args.lint:
        warnings = store.lint()
        for w in warnings:
            print(f"  ! {w}")
        print(f"{len(warnings)} warning(s) in catalog {store.version}")
        sys.exit(1 if warnings else 0)

    rng = random.Random(args.seed) if args.random else None
    session = run_simulation(store, rng, args.top_n)
    if args.all:
        print_ranking(store, session)


if __name__ == "__main__":
    main()
