#!/usr/bin/env python3
"""Simulate a TriageEngine walk-through against the bundled rulesets.

Walks a disease questionnaire from the first question to its result,
printing every question, the options on offer and the answer chosen.
Optionally analyses a free-text symptom description first.

By default answers are **randomised** (``--random``, on by default) so each
run produces a different total.  Use ``--no-random`` to always pick the
first option, or ``--worst`` to always pick the heaviest one.

Usage::

    # Default run (random disease + random answers)
    python scripts/simulate_assessment.py

    # Deterministic run for one disease
    python scripts/simulate_assessment.py -d Flu --no-random

    # Highest-scoring path
    python scripts/simulate_assessment.py -d "Heart Disease" --worst

    # Also analyse free text
    python scripts/simulate_assessment.py -t "I have chest pain and shortness of breath"

    # List available assessments
    python scripts/simulate_assessment.py --list-diseases
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from dataclasses import replace
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path so the script runs from a plain checkout.
# ---------------------------------------------------------------------------
_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from triage_rulesets.config import configure_logging, load_settings  # noqa: E402
from triage_rulesets.engine import TriageEngine  # noqa: E402
from triage_rulesets.errors import PreconditionError, TriageError  # noqa: E402
from triage_rulesets.models.enums import SessionStatus  # noqa: E402
from triage_rulesets.models.result import InvalidInputMarker  # noqa: E402
from triage_rulesets.models.session import SessionState  # noqa: E402
from triage_rulesets.ruleset import RulesetStore  # noqa: E402

_DOUBLE_LINE = "=" * 72
_SINGLE_LINE = "-" * 72

_quiet = False


def _print(*args, **kwargs) -> None:
    """Print wrapper that respects the --quiet flag."""
    if not _quiet:
        print(*args, **kwargs)


def log_header(title: str) -> None:
    """Print a bold section header."""
    _print(f"\n{_DOUBLE_LINE}")
    _print(f" {title}")
    _print(_DOUBLE_LINE)


def log_question_and_answer(state: SessionState, answer_index: int) -> None:
    """Print the current question, its options, and the chosen option."""
    q = state.current_question
    _print(f"\n [Q{q.index + 1}/{state.total_questions}] {q.question}")
    _print(f"     Options: {', '.join(o['text'] for o in q.options)}")
    _print(f" [A] {q.options[answer_index]['text']}")


def pick_answer(options: list[dict], mode: str) -> int:
    """Choose an option index according to the simulation mode."""
    if mode == "random":
        return random.randrange(len(options))
    if mode == "worst":
        # QuestionPayload hides scores; the heaviest option is last by convention
        return len(options) - 1
    return 0


async def run_text_analysis(engine: TriageEngine, text: str) -> None:
    log_header("FREE-TEXT ANALYSIS")
    _print(f" Text: {text!r}")
    try:
        result = await engine.analyze_text(text)
    except PreconditionError:
        _print(f" Too short: {engine.matcher.chars_remaining(text)} more characters needed")
        return

    if isinstance(result, InvalidInputMarker):
        _print(f" Invalid input: {result.message}")
        _print(f" Hint: {result.hint}")
        return

    _print(f" Score: {result.score} (matched: {', '.join(result.matched_keywords)})")
    _print(f" Urgency: {result.label} - {result.description}")
    for cond in result.conditions:
        _print(f"   * {cond.name}: {cond.description}")


async def run_assessment(engine: TriageEngine, disease: str, mode: str) -> int:
    """Walk ``disease`` to completion; return the total score."""
    log_header(f"ASSESSMENT: {disease} ({mode})")
    session = engine.start_assessment(disease)
    state = engine.current_state(session)

    while state.status is SessionStatus.ANSWERING:
        answer = pick_answer(state.current_question.options, mode)
        log_question_and_answer(state, answer)
        engine.select_option(session, state.question_index, answer)
        if state.is_last_question:
            _print("\n Calculating...")
        state = await engine.advance(session)

    result = state.result
    _print(f"\n{_SINGLE_LINE}")
    _print(f" Score: {result.total_score} points -> {result.label}")
    _print(f" {result.description}")
    for item in result.recommendations:
        _print(f"   * {item}")
    _print(f" Next step: {result.next_step}")
    _print(f" {result.disclaimer}")
    _print(_SINGLE_LINE)

    engine.abandon(session)
    return result.total_score


def list_diseases(store: RulesetStore) -> None:
    """Print all available assessments and exit."""
    print("Available assessments:")
    print()
    for i, definition in enumerate(store.list_assessments(), 1):
        print(f"  {i:2d}. {definition.disease:<20s} ({definition.category}, "
              f"{definition.total_questions} questions)")


async def run_simulation(args: argparse.Namespace) -> int:
    settings = replace(load_settings(), submit_delay=args.delay, analyze_delay=args.delay)
    engine = TriageEngine.from_settings(settings)

    if args.text:
        await run_text_analysis(engine, args.text)

    disease = args.disease
    if disease is None:
        names = [d.disease for d in engine.list_assessments()]
        disease = random.choice(names) if args.random else names[0]

    mode = "worst" if args.worst else ("random" if args.random else "first")
    try:
        await run_assessment(engine, disease, mode)
    except TriageError as exc:
        print(f"Simulation failed: {exc}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    global _quiet

    parser = argparse.ArgumentParser(
        description="Simulate a TriageEngine questionnaire walk-through.",
    )
    parser.add_argument(
        "-d", "--disease",
        default=None,
        help="Disease to assess. When omitted, a random one is chosen "
             "(or the first one with --no-random).",
    )
    parser.add_argument(
        "-t", "--text",
        default=None,
        help="Free-text symptom description to analyse before the assessment",
    )
    parser.add_argument(
        "--list-diseases",
        action="store_true",
        help="List all available assessments and exit",
    )
    parser.add_argument(
        "--random",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Randomise answers (default: on). Use --no-random to pick the first option.",
    )
    parser.add_argument(
        "--worst",
        action="store_true",
        help="Always pick the last (heaviest) option",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=0.0,
        help="Cosmetic submit/analyse delay in seconds (default: 0)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable DEBUG logging from the engine",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all print output (exit code still reflects success/failure)",
    )
    args = parser.parse_args()

    _quiet = args.quiet
    configure_logging("DEBUG" if args.verbose else "WARNING")
    if args.verbose:
        logging.getLogger("triage_rulesets").setLevel(logging.DEBUG)

    if args.list_diseases:
        store = RulesetStore()
        store.load()
        list_diseases(store)
        sys.exit(0)

    sys.exit(asyncio.run(run_simulation(args)))


if __name__ == "__main__":
    main()
