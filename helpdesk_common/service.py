"""Entry points for resolved-ticket suggestions and their feedback loop."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional

from .analysis import KeywordExtractor, SimilarityScorer
from .feedback import compute_performance_stats
from .models import FeedbackRecord, PerformanceStats, RankedCandidate, Suggestion
from .record_store import RecordStoreClient
from .ranking import DEFAULT_RANKING_LIMIT, DEFAULT_RELEVANCE_FLOOR, CandidateRanker
from .synthesis import MAX_SUGGESTIONS, REDUNDANCY_THRESHOLD, SuggestionSynthesizer
from .text import sanitize_search_query

LOGGER = logging.getLogger(__name__)

DEFAULT_CANDIDATE_LIMIT = 200


class FeedbackWriteError(RuntimeError):
    """Raised when a feedback event cannot be appended to the log."""


class KnowledgeSuggestionService:
    """Suggest solutions for a new ticket from similar resolved tickets."""

    def __init__(
        self,
        store: RecordStoreClient,
        *,
        scorer: Optional[SimilarityScorer] = None,
        ranker: Optional[CandidateRanker] = None,
        synthesizer: Optional[SuggestionSynthesizer] = None,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
        ranking_limit: int = DEFAULT_RANKING_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.store = store
        self.logger = logger or LOGGER
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.scorer = scorer or SimilarityScorer()
        self.ranker = ranker or CandidateRanker(self.scorer, logger=self.logger)
        self.synthesizer = synthesizer or SuggestionSynthesizer(
            self.scorer, clock=self.clock, logger=self.logger
        )
        self.candidate_limit = max(1, int(candidate_limit))
        self.ranking_limit = max(1, int(ranking_limit))

    @classmethod
    def from_config(
        cls,
        store: RecordStoreClient,
        suggestions_cfg: Mapping[str, Any],
        *,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
        logger: Optional[logging.Logger] = None,
    ) -> "KnowledgeSuggestionService":
        extractor = KeywordExtractor.from_config(suggestions_cfg)
        scorer = SimilarityScorer.from_config(suggestions_cfg, extractor)
        service_logger = logger or LOGGER
        ranker = CandidateRanker(
            scorer,
            relevance_floor=float(suggestions_cfg.get("relevance_floor", DEFAULT_RELEVANCE_FLOOR)),
            logger=service_logger,
        )
        synthesizer = SuggestionSynthesizer(
            scorer,
            max_suggestions=int(suggestions_cfg.get("max_suggestions", MAX_SUGGESTIONS)),
            redundancy_threshold=float(
                suggestions_cfg.get("redundancy_threshold", REDUNDANCY_THRESHOLD)
            ),
            logger=service_logger,
        )
        return cls(
            store,
            scorer=scorer,
            ranker=ranker,
            synthesizer=synthesizer,
            candidate_limit=candidate_limit,
            ranking_limit=int(suggestions_cfg.get("ranking_limit", DEFAULT_RANKING_LIMIT)),
            logger=service_logger,
        )

    def find_similar_resolved(
        self, query_title: str, query_body: str, limit: Optional[int] = None
    ) -> List[RankedCandidate]:
        """Fetch candidates from the store and rank them against the query.

        Store failures propagate; ``generate_suggestions`` is the entry point
        that absorbs them.
        """
        title = sanitize_search_query(query_title)
        body = sanitize_search_query(query_body)
        if not self.scorer.extractor.extract(f"{title} {body}"):
            self.logger.info("Query has no significant keywords; skipping candidate lookup")
            return []
        candidates = self.store.fetch_candidate_records(self.candidate_limit)
        self.logger.debug("Store returned %s candidate records", len(candidates))
        return self.ranker.rank(
            title, body, candidates, self.ranking_limit if limit is None else limit
        )

    def generate_suggestions(self, query_title: str, query_body: str) -> List[Suggestion]:
        try:
            ranked = self.find_similar_resolved(query_title, query_body)
        except Exception:
            self.logger.exception("Unable to load candidate records; returning no suggestions")
            return []
        if not ranked:
            self.logger.info("No similar resolved tickets found")
            return []
        try:
            return self.synthesizer.synthesize(ranked)
        except Exception:
            self.logger.exception("Suggestion synthesis failed; returning no suggestions")
            return []

    def record_feedback(
        self,
        suggestion_id: str,
        ticket_id: str,
        was_helpful: bool,
        feedback_text: Optional[str] = None,
    ) -> FeedbackRecord:
        record = FeedbackRecord(
            suggestion_id=suggestion_id,
            ticket_id=ticket_id,
            was_helpful=was_helpful,
            feedback_text=(feedback_text or "").strip() or None,
            timestamp=self.clock(),
        )
        try:
            self.store.append_feedback(record)
        except Exception as exc:
            self.logger.error("Failed to record feedback for suggestion %s: %s", suggestion_id, exc)
            raise FeedbackWriteError(f"Unable to record feedback for suggestion {suggestion_id}") from exc
        self.logger.info(
            "Feedback saved for suggestion %s: %s",
            suggestion_id,
            "helpful" if was_helpful else "not helpful",
        )
        return record

    def get_performance_stats(self) -> PerformanceStats:
        try:
            events = list(self.store.iter_feedback_records())
        except Exception:
            self.logger.exception("Unable to read feedback log; reporting empty statistics")
            events = []
        stats = compute_performance_stats(events, self.clock())
        self.logger.info(
            "Suggestion accuracy %.2f%% over %s feedback events (%s in the last week)",
            stats.accuracy_rate_percent,
            stats.total,
            stats.last_week_count,
        )
        return stats
