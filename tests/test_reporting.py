"""Tests for the CSV and HTML report writers."""
from __future__ import annotations

import csv
import sys
from datetime import datetime, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from helpdesk_common.models import PerformanceStats, Suggestion  # noqa: E402
from helpdesk_common.reporting import (  # noqa: E402
    SuggestionReportWriter,
    format_stats_table,
    render_stats_html,
)

STATS = PerformanceStats(total=10, helpful=7, accuracy_rate_percent=70.0, last_week_count=3)


def test_write_suggestions_csv(tmp_path: Path) -> None:
    writer = SuggestionReportWriter(output_directory=tmp_path / "reports", report_name="out.csv")
    suggestion = Suggestion(
        suggestion_id="ml_combined_42_1_2",
        suggested_solution_text="Sostituito il toner. Inoltre: Aggiornato il driver di stampa.",
        confidence_score=0.756,
        source_record_ids=["42", "43"],
        keywords=["toner", "driver"],
        created_at=datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc),
    )

    path = writer.write_suggestions("Stampante lenta", [suggestion])

    with path.open(encoding="utf-8", newline="") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == list(SuggestionReportWriter.HEADERS)
    assert rows[1] == [
        "Stampante lenta",
        "ml_combined_42_1_2",
        "0.76",
        "Sostituito il toner. Inoltre: Aggiornato il driver di stampa.",
        "42;43",
        "toner;driver",
        "2026-10-19T08:30:00+00:00",
    ]


def test_write_empty_suggestions_keeps_header(tmp_path: Path) -> None:
    writer = SuggestionReportWriter(output_directory=tmp_path, report_name="empty.csv")

    path = writer.write_suggestions("Nessun risultato", [])

    assert path.read_text(encoding="utf-8").splitlines() == [",".join(SuggestionReportWriter.HEADERS)]


def test_format_stats_table() -> None:
    table = format_stats_table(STATS).splitlines()

    assert table[0] == table[2] == table[-1]
    assert table[0].startswith("+-") and table[0].endswith("-+")
    assert any("Accuracy rate" in line and "70.00%" in line for line in table)
    assert len({len(line) for line in table}) == 1


def test_render_stats_html(tmp_path: Path) -> None:
    destination = tmp_path / "html" / "stats.html"

    render_stats_html(STATS, destination, generated_at=datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc))

    html = destination.read_text(encoding="utf-8")
    assert "<td>70.00%</td>" in html
    assert "<td>Feedback in the last 7 days</td>" in html
    assert "Generated 2026-10-19 09:00:00 UTC" in html
