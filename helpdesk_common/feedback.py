"""Reduce suggestion feedback events into accuracy statistics."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from .models import FeedbackRecord, PerformanceStats, ensure_utc

RECENT_WINDOW = timedelta(days=7)


def compute_performance_stats(events: Iterable[FeedbackRecord], now: datetime) -> PerformanceStats:
    # Naive datetimes on either side are read as UTC.
    cutoff = ensure_utc(now) - RECENT_WINDOW
    total = 0
    helpful = 0
    recent = 0
    for event in events:
        total += 1
        if event.was_helpful:
            helpful += 1
        if ensure_utc(event.timestamp) >= cutoff:
            recent += 1
    accuracy = round(helpful / total * 100, 2) if total else 0.0
    return PerformanceStats(
        total=total,
        helpful=helpful,
        accuracy_rate_percent=accuracy,
        last_week_count=recent,
    )
