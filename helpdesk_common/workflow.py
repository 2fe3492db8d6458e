"""Higher level workflows used by the command line entry points."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .config import load_config, resolve_path, section
from .logging_setup import configure_logging
from .models import FeedbackRecord, PerformanceStats, Suggestion
from .record_store import RecordStoreClient, describe_http_error
from .reporting import SuggestionReportWriter, format_stats_table, render_stats_html
from .service import DEFAULT_CANDIDATE_LIMIT, FeedbackWriteError, KnowledgeSuggestionService
from .triage import TicketAnalysis, TicketTriage

LOGGER = logging.getLogger(__name__)


def _current_utc_timestamp() -> str:
    """Return a compact UTC timestamp for report filenames."""

    return datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")


@dataclass
class SuggestOptions:
    config_path: Optional[str]
    title: str
    body: str = ""
    export: bool = False
    output_directory: Optional[str] = None
    console_level: Optional[str] = None
    simple_console: bool = False


@dataclass
class FeedbackOptions:
    config_path: Optional[str]
    suggestion_id: str
    ticket_id: str
    was_helpful: bool
    feedback_text: Optional[str] = None
    console_level: Optional[str] = None
    simple_console: bool = False


@dataclass
class StatsOptions:
    config_path: Optional[str]
    html_path: Optional[str] = None
    console_level: Optional[str] = None
    simple_console: bool = False


@dataclass
class SuggestResult:
    analysis: TicketAnalysis
    suggestions: List[Suggestion]
    report_path: Optional[Path] = None


def _prepare_logging(
    config: Dict[str, Any],
    options: SuggestOptions | FeedbackOptions | StatsOptions,
    *,
    base_dir: Path,
) -> None:
    logging_config = config.setdefault("logging", {})
    console_cfg = logging_config.setdefault("console", {})
    if options.simple_console:
        console_cfg["rich_format"] = False
    if options.console_level:
        console_cfg["level"] = options.console_level
    configure_logging(config, base_dir=base_dir)


def _create_store(config: Dict[str, Any]) -> RecordStoreClient:
    store_cfg = section(config, "record_store")
    base_url = store_cfg.get("base_url")
    if not base_url:
        raise ValueError("Configuration missing record_store.base_url")
    api_key = store_cfg.get("api_key")
    if not api_key:
        raise ValueError("Configuration missing record_store.api_key")
    return RecordStoreClient(
        base_url=base_url,
        api_key=api_key,
        verify_ssl=store_cfg.get("verify_ssl", True),
        timeout=int(store_cfg.get("timeout", 30)),
        tickets_table=store_cfg.get("tickets_table", "tickets"),
        feedback_table=store_cfg.get("feedback_table", "automation_logs"),
        page_size=int(store_cfg.get("page_size", 500)),
    )


def _create_service(config: Dict[str, Any], store: RecordStoreClient) -> KnowledgeSuggestionService:
    store_cfg = section(config, "record_store")
    return KnowledgeSuggestionService.from_config(
        store,
        section(config, "suggestions"),
        candidate_limit=int(store_cfg.get("candidate_limit", DEFAULT_CANDIDATE_LIMIT)),
    )


def suggest_solutions(options: SuggestOptions, *, base_dir: Optional[Path] = None) -> SuggestResult:
    base_dir = base_dir or Path.cwd()
    config = load_config(options.config_path)
    _prepare_logging(config, options, base_dir=base_dir)

    store = _create_store(config)
    service = _create_service(config, store)
    triage = TicketTriage(service.scorer.extractor)

    analysis = triage.analyze(options.title, options.body)
    suggestions = service.generate_suggestions(options.title, options.body)
    LOGGER.info("Generated %s suggestions for %r", len(suggestions), options.title)

    report_path: Optional[Path] = None
    if options.export:
        reporting_cfg = section(config, "reporting")
        output_directory = resolve_path(
            options.output_directory or reporting_cfg.get("output_directory", "reports"), base=base_dir
        )
        report_name = reporting_cfg.get(
            "report_filename", f"suggestions_{_current_utc_timestamp()}.csv"
        )
        writer = SuggestionReportWriter(output_directory=output_directory, report_name=report_name)
        report_path = writer.write_suggestions(options.title, suggestions)
    return SuggestResult(analysis=analysis, suggestions=suggestions, report_path=report_path)


def submit_feedback(options: FeedbackOptions, *, base_dir: Optional[Path] = None) -> FeedbackRecord:
    """Append one feedback event; raises ``FeedbackWriteError`` on failure."""
    base_dir = base_dir or Path.cwd()
    config = load_config(options.config_path)
    _prepare_logging(config, options, base_dir=base_dir)

    service = _create_service(config, _create_store(config))
    try:
        return service.record_feedback(
            options.suggestion_id,
            options.ticket_id,
            options.was_helpful,
            options.feedback_text,
        )
    except FeedbackWriteError as exc:
        cause = exc.__cause__
        if isinstance(cause, requests.HTTPError):
            LOGGER.error(describe_http_error(cause, "append feedback"))
        raise


def performance_report(options: StatsOptions, *, base_dir: Optional[Path] = None) -> PerformanceStats:
    base_dir = base_dir or Path.cwd()
    config = load_config(options.config_path)
    _prepare_logging(config, options, base_dir=base_dir)

    service = _create_service(config, _create_store(config))
    stats = service.get_performance_stats()
    LOGGER.info("Performance statistics:\n%s", format_stats_table(stats))
    if options.html_path:
        render_stats_html(stats, resolve_path(options.html_path, base=base_dir))
    return stats
