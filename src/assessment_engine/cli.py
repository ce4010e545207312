"""
Command-line interface for clinic-assessment-engine

Lists, inspects, scores and interactively runs assessments from the terminal,
optionally handing the result to lead capture.
"""

import asyncio
import sys
import argparse
import json
import logging
from typing import Callable, List, Optional

from .config import config
from .leads import (
    ContactInfo,
    LeadCapture,
    LeadContext,
    LeadSubmitter,
    MockLeadSubmitter,
    SupabaseLeadSubmitter,
)
from .quiz import (
    AssessmentEngine,
    AssessmentError,
    AssessmentResult,
    AssessmentState,
    QuizCatalog,
    QuizDefinition,
    RemoteCatalog,
    calculate_score,
    default_catalog,
)
from .quiz.catalog import CUSTOM_PREFIX
from .quiz.schema import format_number
from .quiz.scoring import option_points

SEVERITY_COLORS = {
    "normal": "\033[92m",  # Green
    "low risk": "\033[92m",
    "mild": "\033[93m",  # Yellow
    "intermediate risk": "\033[93m",
    "moderate": "\033[33m",  # Orange-ish
    "high": "\033[91m",  # Red
    "high risk": "\033[91m",
    "severe": "\033[91m",
    "very high risk": "\033[91m",
}
RESET = "\033[0m"


def format_result(result: AssessmentResult) -> str:
    """Format a result for terminal output."""
    color = SEVERITY_COLORS.get(result.severity, "")
    lines = [
        "",
        "=" * 60,
        f"{color}{result.summary}{RESET if color else ''}",
        "=" * 60,
        f"Severity: {result.severity}",
        result.interpretation,
    ]
    return "\n".join(lines)


def format_quiz(quiz: QuizDefinition) -> str:
    """Format a definition: questions, options with points, bands."""
    lines = [f"{quiz.id}: {quiz.title}", quiz.description, ""]
    if quiz.is_triage:
        lines.append(f"Triage: {quiz.questions[0].text}")
        for i, branch in enumerate(quiz.branches):
            lines.append(f"  [{i}] {branch.option_label} -> {branch.target_quiz_id}")
        return "\n".join(lines)

    for position, question in enumerate(quiz.questions):
        lines.append(f"{position + 1}. {question.text}")
        for i, option in enumerate(question.options):
            lines.append(f"     [{i}] {option.label} ({format_number(option_points(option, i))} pts)")
    lines.append("")
    lines.append(f"Max score: {format_number(quiz.max_score)}")
    for band in quiz.bands:
        lines.append(f"  {band.key:<18} {band.range_text:>8}  {band.interpretation}")
    return "\n".join(lines)


def ask_choice(question_text: str, labels: List[str], input_fn: Callable[[str], str]) -> int:
    """Prompt until the user picks a numbered option. Returns a 0-based index."""
    print(f"\n{question_text}")
    for i, label in enumerate(labels, 1):
        print(f"  {i}. {label}")
    while True:
        raw = input_fn(f"Choose 1-{len(labels)}: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(labels):
            return int(raw) - 1
        print(f"Please enter a number from 1 to {len(labels)}")


def ask_contact(input_fn: Callable[[str], str]) -> ContactInfo:
    """Prompt until contact details validate."""
    while True:
        contact = ContactInfo(
            name=input_fn("Full name: "),
            email=input_fn("Email: "),
            phone=input_fn("Phone: "),
        )
        errors = contact.validate()
        if not errors:
            return contact
        for error in errors:
            print(f"  {error}")


async def load_catalog(quiz_id: Optional[str] = None) -> QuizCatalog:
    """Built-in catalog, plus the custom quiz when one is requested."""
    catalog = default_catalog(warn_on_load=False)
    if quiz_id is None or not quiz_id.startswith(CUSTOM_PREFIX):
        return catalog
    remote = RemoteCatalog(catalog)
    try:
        await remote.fetch_quiz(quiz_id)
    finally:
        await remote.aclose()
    return remote


def make_submitter(mock: bool) -> LeadSubmitter:
    if mock or not config.supabase.configured:
        return MockLeadSubmitter()
    return SupabaseLeadSubmitter()


async def run_take(args, input_fn: Optional[Callable[[str], str]] = None) -> int:
    """Walk one assessment interactively."""
    input_fn = input_fn or input
    catalog = await load_catalog(args.quiz_id)
    engine = AssessmentEngine(catalog)

    if not args.submit:
        return await _walk(engine, args, input_fn)

    submitter = make_submitter(args.mock)
    capture = LeadCapture(submitter, LeadContext(doctor_id=args.doctor, lead_source=args.source))
    capture.attach(engine)
    try:
        return await _walk(engine, args, input_fn, capture)
    finally:
        await submitter.close()


async def _walk(
    engine: AssessmentEngine,
    args,
    input_fn: Callable[[str], str],
    capture: Optional[LeadCapture] = None,
) -> int:
    engine.start(args.quiz_id)
    quiz = engine.active_quiz
    print(f"\n{quiz.title}")
    print(quiz.description)

    result = None
    while engine.state != AssessmentState.COMPLETED:
        question = engine.current_question()
        index = engine.current_question_index
        choice = ask_choice(question.text, [o.label for o in question.options], input_fn)
        previous_quiz = engine.active_quiz
        result = engine.answer(index, choice)
        if engine.active_quiz is not previous_quiz:
            print(f"\n{engine.active_quiz.title}")
            print(engine.active_quiz.description)
        if capture is not None and capture.pending:
            await capture.flush_partial()

    if args.json:
        print(result.to_json())
    else:
        print(format_result(result))

    if capture is None:
        return 0

    print("\nTo receive your results, please share your contact details.")
    contact = ask_contact(input_fn)
    submission = await capture.submit(engine, contact)
    print(str(submission))
    return 0 if submission.ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="assessment-engine",
        description="Patient self-assessment quizzes for medical practices",
        epilog="Example: assessment-engine score NOSE 2 2 2 2 2",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # List command
    list_parser = subparsers.add_parser("list", help="List available assessments")
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON"
    )

    # Show command
    show_parser = subparsers.add_parser("show", help="Show an assessment's questions and bands")
    show_parser.add_argument("quiz_id", help="Assessment id, e.g. NOSE")
    show_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON"
    )

    # Score command
    score_parser = subparsers.add_parser("score", help="Score answer indices")
    score_parser.add_argument("quiz_id", help="Assessment id, e.g. NOSE")
    score_parser.add_argument(
        "answers",
        nargs="+",
        type=int,
        help="0-based option index for each question, in order"
    )
    score_parser.add_argument(
        "--json",
        action="store_true",
        help="Output result as JSON"
    )

    # Take command
    take_parser = subparsers.add_parser("take", help="Take an assessment interactively")
    take_parser.add_argument("quiz_id", help="Assessment id, e.g. NOSE_SNOT")
    take_parser.add_argument(
        "--submit",
        action="store_true",
        help="Collect contact details and submit a lead"
    )
    take_parser.add_argument(
        "--mock",
        action="store_true",
        help="Use mock lead submitter (no backend calls)"
    )
    take_parser.add_argument(
        "--doctor",
        default="",
        help="Doctor id the lead belongs to"
    )
    take_parser.add_argument(
        "--source",
        default=None,
        help=f"Lead source (default: {config.leads.default_source})"
    )
    take_parser.add_argument(
        "--json",
        action="store_true",
        help="Output result as JSON"
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Check catalog data integrity")
    validate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if there are any warnings"
    )

    # Parse arguments
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log.level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "list":
            catalog = default_catalog(warn_on_load=False)
            quizzes = catalog.definitions()
            if args.json:
                print(json.dumps([
                    {
                        "id": q.id,
                        "title": q.title,
                        "kind": q.kind.value,
                        "questions": len(q.questions),
                        "max_score": q.max_score,
                    }
                    for q in quizzes
                ], indent=2))
            else:
                for q in quizzes:
                    detail = "triage" if q.is_triage else f"{len(q.questions)} questions, max {format_number(q.max_score)}"
                    print(f"  {q.id:<12} {q.title} ({detail})")
            return 0

        if args.command == "show":
            catalog = asyncio.run(load_catalog(args.quiz_id))
            quiz = catalog.get_quiz(args.quiz_id)
            print(quiz.to_json() if args.json else format_quiz(quiz))
            return 0

        if args.command == "score":
            catalog = asyncio.run(load_catalog(args.quiz_id))
            result = calculate_score(catalog, args.quiz_id, args.answers)
            print(result.to_json() if args.json else format_result(result))
            return 0

        if args.command == "take":
            return asyncio.run(run_take(args))

        if args.command == "validate":
            catalog = default_catalog(warn_on_load=False)
            warnings = [w for ws in catalog.warnings.values() for w in ws]
            warnings.extend(catalog.check_branches())
            warnings = list(dict.fromkeys(warnings))
            if not warnings:
                print(f"Catalog OK ({len(catalog)} assessments)")
                return 0
            print(f"{len(warnings)} data integrity warning(s):")
            for warning in warnings:
                print(f"  {warning}")
            return 1 if args.strict else 0

    except AssessmentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
