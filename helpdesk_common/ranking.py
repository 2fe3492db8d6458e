"""Rank resolved tickets by similarity to a new ticket."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from .analysis import SimilarityScorer
from .models import HistoricalRecord, RankedCandidate

LOGGER = logging.getLogger(__name__)

DEFAULT_RELEVANCE_FLOOR = 0.01
DEFAULT_RANKING_LIMIT = 10

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _recency_key(candidate: RankedCandidate) -> Tuple[bool, datetime]:
    resolved_at = candidate.record.resolved_at
    return (resolved_at is not None, resolved_at or _OLDEST)


class CandidateRanker:
    """Score candidate records against a query and keep the best matches."""

    def __init__(
        self,
        scorer: Optional[SimilarityScorer] = None,
        *,
        relevance_floor: float = DEFAULT_RELEVANCE_FLOOR,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.scorer = scorer or SimilarityScorer()
        self.relevance_floor = float(relevance_floor)
        self.logger = logger or LOGGER

    def rank(
        self,
        query_title: str,
        query_body: str,
        candidates: Iterable[HistoricalRecord],
        limit: int = DEFAULT_RANKING_LIMIT,
    ) -> List[RankedCandidate]:
        query_text = f"{query_title or ''} {query_body or ''}"
        scored: List[RankedCandidate] = []
        examined = 0
        for record in candidates:
            examined += 1
            try:
                if not record.has_resolution():
                    self.logger.debug("Skipping record %s without resolution text", record.identifier)
                    continue
                similarity = self.scorer.score(query_text, record.issue_text)
            except Exception:
                self.logger.warning(
                    "Skipping candidate %s after scoring failure",
                    getattr(record, "identifier", "<unknown>"),
                    exc_info=True,
                )
                continue
            if similarity <= self.relevance_floor:
                continue
            scored.append(RankedCandidate(record=record, similarity=similarity))

        # Two stable sorts: newest first, then by similarity.
        scored.sort(key=_recency_key, reverse=True)
        scored.sort(key=lambda candidate: candidate.similarity, reverse=True)
        ranked = scored[: max(0, limit)]
        self.logger.info(
            "Ranked %s of %s candidate records above floor %.2f (returning %s)",
            len(scored),
            examined,
            self.relevance_floor,
            len(ranked),
        )
        return ranked


def find_similar_resolved(
    query_title: str,
    query_body: str,
    candidates: Iterable[HistoricalRecord],
    limit: int = DEFAULT_RANKING_LIMIT,
    *,
    scorer: Optional[SimilarityScorer] = None,
) -> List[RankedCandidate]:
    """Rank ``candidates`` against the query using the default floor."""
    return CandidateRanker(scorer).rank(query_title, query_body, candidates, limit)
