"""Logging configuration for the helpdesk suggestion tools."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict

from rich.logging import RichHandler

from .config import resolve_path

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_PATH = "logs/helpdesk.log"


def _console_handler(console_cfg: Dict[str, Any]) -> logging.Handler:
    level = str(console_cfg.get("level", "INFO")).upper()
    if console_cfg.get("rich_format", False):
        handler: logging.Handler = RichHandler(level=level, rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(file_cfg: Dict[str, Any], base_dir: Path | None) -> logging.Handler:
    file_path = resolve_path(file_cfg.get("path", DEFAULT_LOG_PATH), base=base_dir)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(file_path, mode="a", encoding="utf-8")
    handler.setLevel(str(file_cfg.get("level", "DEBUG")).upper())
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def configure_logging(config: Dict[str, Any], *, base_dir: Path | None = None) -> None:
    """Configure logging sinks based on YAML configuration.

    ``logging.levels`` maps logger names to levels, e.g. to keep the per-pair
    similarity trace of ``helpdesk_common.analysis`` out of the file log.
    """
    logging.captureWarnings(True)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    logging_config = config.get("logging") or {}
    console_cfg = logging_config.get("console") or {}
    file_cfg = logging_config.get("file") or {}

    if console_cfg.get("enabled", True):
        root.addHandler(_console_handler(console_cfg))
    if file_cfg.get("enabled", True):
        root.addHandler(_file_handler(file_cfg, base_dir))

    for logger_name, level in (logging_config.get("levels") or {}).items():
        logging.getLogger(logger_name).setLevel(str(level).upper())
