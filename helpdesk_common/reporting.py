"""Write suggestion and feedback statistics reports."""
from __future__ import annotations

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence

from jinja2 import Template

from .models import PerformanceStats, Suggestion

LOGGER = logging.getLogger(__name__)

_STATS_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <style>
    body { font-family: Arial, sans-serif; margin: 2rem; color: #222; }
    table { border-collapse: collapse; }
    th, td { border: 1px solid #ccc; padding: 0.4rem 0.8rem; text-align: left; }
    th { background: #f2f2f2; }
  </style>
</head>
<body>
  <h1>{{ title }}</h1>
  <p>Generated {{ generated_at }}</p>
  <table>
    <tr><th>Metric</th><th>Value</th></tr>
    {% for label, value in rows %}
    <tr><td>{{ label }}</td><td>{{ value }}</td></tr>
    {% endfor %}
  </table>
</body>
</html>
""",
    autoescape=True,
)


def stats_rows(stats: PerformanceStats) -> Sequence[tuple[str, str]]:
    return (
        ("Feedback received", str(stats.total)),
        ("Marked helpful", str(stats.helpful)),
        ("Accuracy rate", f"{stats.accuracy_rate_percent:.2f}%"),
        ("Feedback in the last 7 days", str(stats.last_week_count)),
    )


def format_stats_table(stats: PerformanceStats) -> str:
    """Return a plain text table of the statistics for console output."""

    rows = stats_rows(stats)
    label_width = max(len(label) for label, _ in rows)
    value_width = max(len(value) for _, value in rows)
    border = f"+{'-' * (label_width + 2)}+{'-' * (value_width + 2)}+"
    header = f"| {'Metric'.ljust(label_width)} | {'Value'.rjust(value_width)} |"
    lines = [border, header, border]
    for label, value in rows:
        lines.append(f"| {label.ljust(label_width)} | {value.rjust(value_width)} |")
    lines.append(border)
    return "\n".join(lines)


def render_stats_html(
    stats: PerformanceStats,
    destination: Path,
    *,
    generated_at: Optional[datetime] = None,
) -> Path:
    generated = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S UTC")
    destination.parent.mkdir(parents=True, exist_ok=True)
    html = _STATS_TEMPLATE.render(
        title="Suggestion feedback statistics",
        generated_at=generated,
        rows=stats_rows(stats),
    )
    destination.write_text(html, encoding="utf-8")
    LOGGER.info("Statistics report written to %s", destination)
    return destination


class SuggestionReportWriter:
    """Persist generated suggestions for offline review."""

    HEADERS: Sequence[str] = (
        "query_title",
        "suggestion_id",
        "confidence_score",
        "suggested_solution_text",
        "source_record_ids",
        "keywords",
        "created_at",
    )

    def __init__(self, *, output_directory: Path, report_name: str) -> None:
        self.output_directory = output_directory
        self.report_name = report_name
        self.output_directory.mkdir(parents=True, exist_ok=True)

    def write_suggestions(self, query_title: str, suggestions: Iterable[Suggestion]) -> Path:
        report_path = self.output_directory / self.report_name
        LOGGER.info("Writing suggestion report to %s", report_path)
        with report_path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(self.HEADERS)
            for suggestion in suggestions:
                row = suggestion.to_dict()
                writer.writerow(
                    [
                        query_title,
                        row["suggestion_id"],
                        f"{suggestion.confidence_score:.2f}",
                        row["suggested_solution_text"],
                        ";".join(row["source_record_ids"]),
                        ";".join(row["keywords"]),
                        row["created_at"],
                    ]
                )
        return report_path
