#!/usr/bin/env python3
"""Print accuracy statistics for generated suggestions."""
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
from helpdesk_common.reporting import format_stats_table  # type: ignore  # pylint: disable=import-error
from helpdesk_common.workflow import StatsOptions, performance_report  # type: ignore  # pylint: disable=import-error

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarise helpful / not helpful feedback on generated suggestions.",
    )
    parser.add_argument(
        "--config",
        help=(
            "Path to configuration YAML file. Defaults to "
            f"{DEFAULT_CONFIG_PATH} or config/config.yaml if present."
        ),
    )
    parser.add_argument("--html", help="Optional path for an HTML copy of the statistics.")
    parser.add_argument(
        "--console-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the console logging level.",
    )
    return parser


def run(options: StatsOptions) -> List[str]:
    try:
        stats = performance_report(options, base_dir=BASE_DIR)
    except (ConfigError, ValueError) as exc:
        LOGGER.exception("Failed to compute suggestion statistics: %s", exc)
        raise SystemExit(1) from exc
    lines = format_stats_table(stats).splitlines()
    for line in lines:
        print(line)
    return lines


def main(argv: Iterable[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    run(StatsOptions(config_path=args.config, html_path=args.html, console_level=args.console_level))


if __name__ == "__main__":
    main()
