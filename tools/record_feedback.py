#!/usr/bin/env python3
"""Record whether a suggestion helped resolve a ticket."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = BASE_DIR / "config" / "config.yaml"
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from helpdesk_common.config import ConfigError  # type: ignore  # pylint: disable=import-error
from helpdesk_common.service import FeedbackWriteError  # type: ignore  # pylint: disable=import-error
from helpdesk_common.workflow import FeedbackOptions, submit_feedback  # type: ignore  # pylint: disable=import-error

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Store feedback for a generated suggestion.")
    parser.add_argument("--suggestion-id", required=True, help="Identifier printed next to the suggestion.")
    parser.add_argument("--ticket-id", required=True, help="Ticket the suggestion was shown for.")
    verdict = parser.add_mutually_exclusive_group(required=True)
    verdict.add_argument("--helpful", dest="was_helpful", action="store_true", help="The suggestion helped.")
    verdict.add_argument(
        "--not-helpful", dest="was_helpful", action="store_false", help="The suggestion did not help."
    )
    parser.add_argument("--feedback", help="Optional free text comment.")
    parser.add_argument(
        "--config",
        help=(
            "Path to configuration YAML file. Defaults to "
            f"{DEFAULT_CONFIG_PATH} or config/config.yaml if present."
        ),
    )
    parser.add_argument(
        "--console-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the console logging level.",
    )
    return parser


def run(options: FeedbackOptions) -> int:
    try:
        submit_feedback(options, base_dir=BASE_DIR)
    except (ConfigError, ValueError) as exc:
        LOGGER.error("Cannot record feedback: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except FeedbackWriteError as exc:
        LOGGER.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    verdict = "helpful" if options.was_helpful else "not helpful"
    print(f"Feedback recorded: suggestion {options.suggestion_id} marked {verdict}.")
    return 0


def main(argv: Iterable[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    options = FeedbackOptions(
        config_path=args.config,
        suggestion_id=args.suggestion_id,
        ticket_id=args.ticket_id,
        was_helpful=args.was_helpful,
        feedback_text=args.feedback,
        console_level=args.console_level,
    )
    raise SystemExit(run(options))


if __name__ == "__main__":
    main()
