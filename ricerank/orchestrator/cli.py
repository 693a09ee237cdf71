"""
RICE Prioritizer CLI
====================

Command-line interface for the prioritization pipeline.

Commands:
    score        - Score and rank a backlog from a JSON request file
    sample       - Print a sample request
    sensitivity  - Print what-if scores for each item

Usage:
    python -m ricerank.orchestrator.cli sample --name saas > backlog.json
    python -m ricerank.orchestrator.cli score --input backlog.json --no-ai
    python -m ricerank.orchestrator.cli score --input backlog.json --markdown out.md --csv out.csv
    python -m ricerank.orchestrator.cli sensitivity --input backlog.json

Exit codes: 0 ok, 1 failure, 2 invalid input.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from ..ai.rationale_generator import RationaleGenerator
from ..api.models import ScoreRequest
from ..data.config import load_settings
from ..data.samples import SAMPLES, build_sample_request
from ..export.exporter import format_number, rows_to_csv
from ..scoring.sensitivity import calculate_sensitivity
from .logging_config import setup_logging
from .pipeline import OutputValidationError, PrioritizationPipeline, rank_request

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


def load_request(path: str) -> ScoreRequest:
    """
    Read and validate a JSON request file.

    Raises:
        ValidationError: the content does not match the request schema
        ValueError: the file is not JSON
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}")
    return ScoreRequest.model_validate(payload)


def print_validation_errors(error: ValidationError):
    """One line per offending field."""
    print("ERROR: Invalid request")
    for err in error.errors():
        location = ".".join(str(p) for p in err["loc"])
        print(f"  - {location}: {err['msg']}")


def cmd_score(args):
    """Score, rank and export a backlog."""
    try:
        request = load_request(args.input)
    except ValidationError as e:
        print_validation_errors(e)
        return EXIT_INVALID_INPUT
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        return EXIT_INVALID_INPUT

    settings = load_settings()
    generator = RationaleGenerator(
        provider=settings.llm.provider,
        model=settings.llm.model,
        temperature=settings.llm.temperature,
        max_tokens=settings.llm.max_tokens,
    )
    use_ai = settings.llm.enabled and not args.no_ai
    pipeline = PrioritizationPipeline(generator=generator, use_ai=use_ai)

    try:
        response = asyncio.run(pipeline.run(request))
    except OutputValidationError as e:
        print(f"ERROR: Failed to score items: {e}")
        return EXIT_FAILURE

    if args.markdown:
        Path(args.markdown).write_text(response.exports.markdown, encoding="utf-8")
    if args.csv:
        rows = [row.model_dump() for row in response.exports.csvRows]
        Path(args.csv).write_text(rows_to_csv(rows), encoding="utf-8")

    if args.json:
        print(response.model_dump_json(indent=2))
        return EXIT_OK

    print("=" * 60)
    print("RICE PRIORITIZATION")
    print("=" * 60)
    print(f"Timeframe: {response.meta.timeframe.value} | Effort unit: {response.meta.effortUnit.value}")
    print(f"Note: {response.meta.confidenceNote}")
    print()

    for it in response.items:
        print(f"{it.computed.rank:>2}. [{it.itemId}] {it.title}")
        print(f"    Score: {format_number(it.computed.riceScore)}")
        print(f"    Next: {it.recommendedNextStep.type.value} - {it.recommendedNextStep.suggestion}")

    print()
    print(f"Top 3:        {', '.join(response.summary.top3) or '-'}")
    print(f"Quick wins:   {', '.join(response.summary.quickWins) or '-'}")
    print(f"High risk:    {', '.join(response.summary.highRiskHighReward) or '-'}")

    if response.meta.clarifyingQuestions:
        print()
        print("Clarifying questions:")
        for q in response.meta.clarifyingQuestions:
            print(f"  - {q}")

    return EXIT_OK


def cmd_sample(args):
    """Print a sample request."""
    request = build_sample_request(args.name, timeframe=args.timeframe, effort_unit=args.effort_unit)
    print(json.dumps(request, indent=2))
    return EXIT_OK


def cmd_sensitivity(args):
    """Print single-factor what-if scores."""
    try:
        request = load_request(args.input)
    except ValidationError as e:
        print_validation_errors(e)
        return EXIT_INVALID_INPUT
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        return EXIT_INVALID_INPUT

    ranked = rank_request(request)

    header = f"{'Rank':>4}  {'Item':<8} {'Base':>10} {'Conf-20':>10} {'Conf+20':>10} {'Eff-20%':>10} {'Eff+20%':>10} {'Reach-20%':>10}"
    print(header)
    print("-" * len(header))
    for it in ranked:
        s = calculate_sensitivity(it)
        values = [s.base_score, s.confidence_minus_20, s.confidence_plus_20,
                  s.effort_minus_20, s.effort_plus_20, s.reach_minus_20]
        cells = " ".join(f"{format_number(v):>10}" for v in values)
        print(f"{it.rank:>4}  {it.item_id:<8} {cells}")

    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ricerank",
        description="RICE backlog prioritization CLI",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # score command
    score_parser = subparsers.add_parser("score", help="Score and rank a backlog")
    score_parser.add_argument(
        "--input",
        required=True,
        help="JSON request file (timeframe, effortUnit, items)",
    )
    score_parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip AI rationale, use deterministic notes",
    )
    score_parser.add_argument(
        "--markdown",
        help="Write the markdown export to this file",
    )
    score_parser.add_argument(
        "--csv",
        help="Write the CSV export to this file",
    )
    score_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full response as JSON",
    )

    # sample command
    sample_parser = subparsers.add_parser("sample", help="Print a sample request")
    sample_parser.add_argument(
        "--name",
        choices=sorted(SAMPLES),
        default="saas",
        help="Sample backlog (default: saas)",
    )
    sample_parser.add_argument(
        "--timeframe",
        choices=["week", "month", "quarter"],
        default="month",
    )
    sample_parser.add_argument(
        "--effort-unit",
        choices=["days", "points"],
        default="days",
    )

    # sensitivity command
    sens_parser = subparsers.add_parser("sensitivity", help="Show what-if scores")
    sens_parser.add_argument(
        "--input",
        required=True,
        help="JSON request file",
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings()
    setup_logging(
        level="DEBUG" if args.verbose else settings.logging.level,
        json_output=settings.logging.json_logs,
        log_file=settings.logging.log_file,
    )

    if args.command is None:
        parser.print_help()
        return EXIT_FAILURE

    commands = {
        "score": cmd_score,
        "sample": cmd_sample,
        "sensitivity": cmd_sensitivity,
    }

    try:
        return commands[args.command](args)
    except Exception as e:
        print(f"ERROR: {args.command} failed: {e}")
        logging.exception("Command failed")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
