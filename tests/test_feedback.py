"""Tests for feedback statistics and feedback log records."""
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from helpdesk_common.feedback import compute_performance_stats  # noqa: E402
from helpdesk_common.models import FeedbackRecord  # noqa: E402

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def event(helpful: bool, age: timedelta) -> FeedbackRecord:
    return FeedbackRecord(
        suggestion_id="ml_1_1_1",
        ticket_id="T-1",
        was_helpful=helpful,
        timestamp=NOW - age,
    )


def test_stats_over_mixed_events() -> None:
    events = [event(True, timedelta(days=1 + index)) for index in range(3)]
    events += [event(True, timedelta(days=20 + index)) for index in range(4)]
    events += [event(False, timedelta(days=30 + index)) for index in range(3)]

    stats = compute_performance_stats(events, NOW)

    assert stats.total == 10
    assert stats.helpful == 7
    assert stats.accuracy_rate_percent == 70.0
    assert stats.last_week_count == 3


def test_stats_without_events() -> None:
    stats = compute_performance_stats([], NOW)

    assert stats.as_dict() == {
        "total": 0,
        "helpful": 0,
        "accuracy_rate_percent": 0.0,
        "last_week_count": 0,
    }


def test_accuracy_is_rounded_to_two_decimals() -> None:
    events = [event(True, timedelta(days=1)), event(False, timedelta(days=1)), event(False, timedelta(days=1))]

    assert compute_performance_stats(events, NOW).accuracy_rate_percent == 33.33


def test_recent_window_includes_exact_boundary() -> None:
    events = [event(True, timedelta(days=7)), event(True, timedelta(days=7, seconds=1))]

    assert compute_performance_stats(events, NOW).last_week_count == 1


def test_stats_mix_naive_and_aware_datetimes() -> None:
    naive_now = NOW.replace(tzinfo=None)
    events = [
        event(True, timedelta(days=1)),
        FeedbackRecord(
            suggestion_id="ml_2_1_1",
            ticket_id="T-2",
            was_helpful=False,
            timestamp=naive_now - timedelta(days=2),
        ),
        FeedbackRecord(
            suggestion_id="ml_3_1_1",
            ticket_id="T-3",
            was_helpful=True,
            timestamp=naive_now - timedelta(days=9),
        ),
    ]

    naive_stats = compute_performance_stats(events, naive_now)
    aware_stats = compute_performance_stats(events, NOW)

    assert naive_stats == aware_stats
    assert (naive_stats.total, naive_stats.helpful, naive_stats.last_week_count) == (3, 2, 2)


def test_stats_accept_generators() -> None:
    stats = compute_performance_stats((event(False, timedelta(hours=2)) for _ in range(2)), NOW)

    assert (stats.total, stats.helpful, stats.last_week_count) == (2, 0, 2)


def test_feedback_log_entry_shape() -> None:
    record = FeedbackRecord(
        suggestion_id="ml_42_1_1",
        ticket_id="T-9",
        was_helpful=True,
        feedback_text="Risolto",
        timestamp=NOW,
    )

    entry = record.to_log_entry()

    assert entry == {
        "ticket_id": "T-9",
        "action_type": "ml_feedback",
        "action_details": {
            "suggestion_id": "ml_42_1_1",
            "was_helpful": True,
            "feedback": "Risolto",
            "timestamp": "2026-10-19T12:00:00+00:00",
        },
        "success": True,
    }


def test_feedback_from_log_entry_prefers_row_timestamp() -> None:
    record = FeedbackRecord.from_log_entry(
        {
            "ticket_id": 9,
            "success": False,
            "triggered_at": "2026-10-18T10:00:00Z",
            "action_details": {"suggestion_id": "ml_1", "timestamp": "2026-01-01T00:00:00Z"},
        }
    )

    assert record.ticket_id == "9"
    assert record.suggestion_id == "ml_1"
    assert record.was_helpful is False
    assert record.timestamp == datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc)


def test_feedback_from_log_entry_falls_back_to_details() -> None:
    record = FeedbackRecord.from_log_entry(
        {
            "ticket_id": "T-2",
            "action_details": {
                "suggestion_id": "ml_2",
                "was_helpful": True,
                "timestamp": "2026-10-17T08:00:00+02:00",
            },
        }
    )

    assert record.was_helpful is True
    assert record.timestamp == datetime(2026, 10, 17, 6, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "payload",
    [
        {"ticket_id": "T-3", "action_details": {"suggestion_id": "ml_3"}},
        {"ticket_id": "T-3", "triggered_at": "not a date", "action_details": {}},
        {"ticket_id": "T-3", "triggered_at": "2026-10-17T08:00:00Z", "action_details": "oops"},
    ],
)
def test_feedback_from_log_entry_rejects_malformed_rows(payload) -> None:
    with pytest.raises(ValueError):
        FeedbackRecord.from_log_entry(payload)
