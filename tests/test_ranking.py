"""Tests for candidate ranking."""
from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from helpdesk_common.models import HistoricalRecord  # noqa: E402
from helpdesk_common.ranking import CandidateRanker, find_similar_resolved  # noqa: E402

BASE_TIME = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


class StubScorer:
    """Return a fixed similarity per candidate title."""

    def __init__(self, scores: Dict[str, float], failing: Optional[set[str]] = None) -> None:
        self.scores = scores
        self.failing = failing or set()
        self.calls = 0

    def score(self, text_a: str, text_b: str) -> float:
        self.calls += 1
        title = text_b.strip()
        if title in self.failing:
            raise ValueError(f"cannot score {title}")
        return self.scores[title]


def make_record(
    identifier: str,
    *,
    title: Optional[str] = None,
    body: str = "",
    resolution: Optional[str] = "Riavviato il servizio interessato.",
    resolved_at: Optional[datetime] = BASE_TIME,
) -> HistoricalRecord:
    return HistoricalRecord(
        identifier=identifier,
        title_text=title if title is not None else identifier,
        body_text=body,
        resolution_text=resolution,
        resolved_at=resolved_at,
    )


def test_rank_orders_by_descending_similarity() -> None:
    scorer = StubScorer({"low": 0.2, "high": 0.9, "mid": 0.5})
    ranker = CandidateRanker(scorer)

    ranked = ranker.rank("query", "", [make_record("low"), make_record("high"), make_record("mid")])

    assert [candidate.identifier for candidate in ranked] == ["high", "mid", "low"]
    assert [candidate.similarity for candidate in ranked] == [0.9, 0.5, 0.2]


def test_rank_discards_candidates_at_or_below_floor() -> None:
    scorer = StubScorer({"zero": 0.0, "floor": 0.01, "above": 0.02})
    ranker = CandidateRanker(scorer)

    ranked = ranker.rank("query", "", [make_record("zero"), make_record("floor"), make_record("above")])

    assert [candidate.identifier for candidate in ranked] == ["above"]


def test_rank_breaks_ties_by_most_recent_resolution() -> None:
    scorer = StubScorer({"old": 0.5, "new": 0.5, "undated": 0.5, "best": 0.8})
    ranker = CandidateRanker(scorer)
    records = [
        make_record("undated", resolved_at=None),
        make_record("old", resolved_at=BASE_TIME - timedelta(days=30)),
        make_record("new", resolved_at=BASE_TIME),
        make_record("best", resolved_at=BASE_TIME - timedelta(days=90)),
    ]

    ranked = ranker.rank("query", "", records)

    assert [candidate.identifier for candidate in ranked] == ["best", "new", "old", "undated"]


def test_rank_skips_records_without_resolution_text() -> None:
    scorer = StubScorer({"blank": 0.9, "missing": 0.9, "kept": 0.4})
    ranker = CandidateRanker(scorer)
    records = [
        make_record("blank", resolution="   "),
        make_record("missing", resolution=None),
        make_record("kept"),
    ]

    ranked = ranker.rank("query", "", records)

    assert [candidate.identifier for candidate in ranked] == ["kept"]
    assert scorer.calls == 1


def test_rank_isolates_scoring_failures(caplog: pytest.LogCaptureFixture) -> None:
    scorer = StubScorer({"good": 0.6, "other": 0.3}, failing={"broken"})
    ranker = CandidateRanker(scorer)

    with caplog.at_level(logging.WARNING):
        ranked = ranker.rank(
            "query", "", [make_record("broken"), make_record("good"), make_record("other")]
        )

    assert [candidate.identifier for candidate in ranked] == ["good", "other"]
    assert any("Skipping candidate broken" in record.getMessage() for record in caplog.records)


def test_rank_truncates_to_limit() -> None:
    scores = {f"t{index}": index / 10 for index in range(1, 8)}
    ranker = CandidateRanker(StubScorer(scores))

    ranked = ranker.rank("query", "", [make_record(name) for name in scores], limit=3)

    assert [candidate.identifier for candidate in ranked] == ["t7", "t6", "t5"]


def test_rank_returns_empty_list_without_candidates() -> None:
    assert CandidateRanker(StubScorer({})).rank("query", "body", []) == []


def test_rank_uses_injected_logger(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.ranking")
    ranker = CandidateRanker(StubScorer({"one": 0.4}), logger=logger)

    with caplog.at_level(logging.INFO, logger="tests.ranking"):
        ranker.rank("query", "", [make_record("one")])

    assert [record.name for record in caplog.records] == ["tests.ranking"]
    assert "Ranked 1 of 1 candidate records" in caplog.records[0].getMessage()


def test_find_similar_resolved_matches_technical_ticket() -> None:
    records = [
        make_record(
            "42",
            title="IPOS non funziona",
            resolution="Riavviare il servizio IPOS e ripetere l'aggiornamento.",
        ),
        make_record(
            "43",
            title="Problema wifi ufficio",
            resolution="riavviato router",
        ),
    ]

    ranked = find_similar_resolved(
        "Problema aggiornamento IPOS", "il sistema IPOS non si aggiorna", records, limit=10
    )

    assert [candidate.identifier for candidate in ranked] == ["42"]
    assert ranked[0].similarity > 0.3


def test_find_similar_resolved_excludes_unrelated_ticket() -> None:
    records = [
        make_record("7", title="problema wifi ufficio", body="", resolution="riavviato router"),
    ]

    assert find_similar_resolved("stampante non stampa", "", records) == []
