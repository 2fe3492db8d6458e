#!/usr/bin/env python3
"""Suggest solutions for a new ticket from similar resolved tickets."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = BASE_DIR / "config" / "config.yaml"
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from helpdesk_common.config import ConfigError  # type: ignore  # pylint: disable=import-error
from helpdesk_common.workflow import SuggestOptions, SuggestResult, suggest_solutions  # type: ignore  # pylint: disable=import-error

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Triage a ticket and list solutions taken from similar resolved tickets.",
    )
    parser.add_argument("--title", required=True, help="Title of the new ticket.")
    parser.add_argument("--body", default="", help="Description of the new ticket.")
    parser.add_argument(
        "--config",
        help=(
            "Path to configuration YAML file. Defaults to "
            f"{DEFAULT_CONFIG_PATH} or config/config.yaml if present."
        ),
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="Also write the suggestions to a CSV file in the reporting output directory.",
    )
    parser.add_argument(
        "--output-directory",
        help="Directory for the exported CSV. Overrides reporting.output_directory.",
    )
    parser.add_argument(
        "--console-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the console logging level.",
    )
    parser.add_argument(
        "--simple-console",
        action="store_true",
        help="Use a simple console log format instead of Rich formatting.",
    )
    return parser


def render_result(result: SuggestResult) -> List[str]:
    analysis = result.analysis
    lines = [
        f"Category: {analysis.category}",
        f"Priority: {analysis.priority} (urgency {analysis.urgency}, "
        f"estimated resolution {analysis.estimated_resolution_time})",
    ]
    if analysis.keywords:
        lines.append(f"Keywords: {', '.join(analysis.keywords)}")
    for solution in analysis.suggested_solutions:
        lines.append(f"- [{solution.confidence:.0%}] {solution.title}: {solution.solution}")

    lines.append("")
    if not result.suggestions:
        lines.append("No suggestions found from resolved tickets.")
    for index, suggestion in enumerate(result.suggestions, start=1):
        sources = ", ".join(suggestion.source_record_ids)
        lines.append(
            f"{index}. [{suggestion.confidence_score:.0%}] {suggestion.suggested_solution_text}"
        )
        lines.append(f"   id={suggestion.suggestion_id} sources={sources}")
    if result.report_path is not None:
        lines.append("")
        lines.append(f"Suggestions exported to {result.report_path}")
    return lines


def run(options: SuggestOptions) -> int:
    try:
        result = suggest_solutions(options, base_dir=BASE_DIR)
    except (ConfigError, ValueError) as exc:
        LOGGER.error("Cannot generate suggestions: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    for line in render_result(result):
        print(line)
    return 0


def main(argv: Iterable[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    options = SuggestOptions(
        config_path=args.config,
        title=args.title,
        body=args.body,
        export=args.export,
        output_directory=args.output_directory,
        console_level=args.console_level,
        simple_console=args.simple_console,
    )
    raise SystemExit(run(options))


if __name__ == "__main__":
    main()
