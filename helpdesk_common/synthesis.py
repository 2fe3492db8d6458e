"""Turn ranked resolved tickets into solution suggestions."""
from __future__ import annotations

import itertools
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .analysis import SimilarityScorer
from .models import RankedCandidate, Suggestion
from .text import TERMINAL_PUNCTUATION, clean_and_format

LOGGER = logging.getLogger(__name__)

DIRECT_LIMIT = 5
COMBINE_LIMIT = 3
MAX_SUGGESTIONS = 5
REDUNDANCY_THRESHOLD = 0.7

DIRECT_BOOST = 0.10
DIRECT_CAP = 0.95
COMBINED_BOOST = 0.05
COMBINED_CAP = 0.9

MIN_SOURCE_LENGTH = 10
MIN_COMBINED_LENGTH = 20
MIN_SUGGESTION_LENGTH = 15

COMBINED_JOINER = ". Inoltre: "


def _usable(text: Optional[str]) -> bool:
    return bool(text) and len(text.strip()) > MIN_SOURCE_LENGTH


class SuggestionSynthesizer:
    """Build direct and combined suggestions from ranked candidates.

    Direct suggestions reuse one candidate's resolution each. The combined
    suggestion merges the top resolutions, or keeps the longer one when the
    first two say the same thing. Suggestions with identical text are merged
    into the higher-confidence one.
    """

    def __init__(
        self,
        scorer: Optional[SimilarityScorer] = None,
        *,
        max_suggestions: int = MAX_SUGGESTIONS,
        redundancy_threshold: float = REDUNDANCY_THRESHOLD,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.scorer = scorer or SimilarityScorer()
        self.max_suggestions = max(1, int(max_suggestions))
        self.redundancy_threshold = float(redundancy_threshold)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logger or LOGGER

    # -- Combination ---------------------------------------------------------------
    def combine_solutions(self, texts: Sequence[Optional[str]]) -> str:
        usable = [text.strip() for text in texts if _usable(text)]
        if not usable:
            return ""
        if len(usable) == 1:
            return clean_and_format(usable[0])
        first, second = usable[0], usable[1]
        similarity = self.scorer.score(first, second)
        if similarity > self.redundancy_threshold:
            longer = second if len(second) > len(first) else first
            self.logger.debug("Top resolutions are redundant (%.2f); keeping the longer one", similarity)
            return clean_and_format(longer)
        head = first.rstrip().rstrip("".join(TERMINAL_PUNCTUATION)).rstrip()
        return clean_and_format(f"{head}{COMBINED_JOINER}{second}")

    # -- Suggestion builders -----------------------------------------------------
    def _new_id(self, prefix: str, created_at: datetime, sequence: Iterator[int]) -> str:
        stamp = int(created_at.timestamp() * 1000)
        return f"ml_{prefix}_{stamp}_{next(sequence)}"

    def _direct_suggestions(
        self, ranked: Sequence[RankedCandidate], created_at: datetime, sequence: Iterator[int]
    ) -> List[Suggestion]:
        suggestions: List[Suggestion] = []
        for candidate in ranked[:DIRECT_LIMIT]:
            try:
                resolution = candidate.resolution_text
                if not _usable(resolution):
                    continue
                keywords = self.scorer.extractor.extract(
                    f"{candidate.record.title_text or ''} {resolution}"
                )
                suggestions.append(
                    Suggestion(
                        suggestion_id=self._new_id(candidate.identifier, created_at, sequence),
                        suggested_solution_text=clean_and_format(resolution),
                        confidence_score=min(DIRECT_CAP, candidate.similarity + DIRECT_BOOST),
                        source_record_ids=[candidate.identifier],
                        keywords=keywords,
                        created_at=created_at,
                    )
                )
            except Exception:
                self.logger.warning(
                    "Skipping direct suggestion for candidate %s",
                    getattr(candidate, "identifier", "<unknown>"),
                    exc_info=True,
                )
        return suggestions

    def _combined_suggestion(
        self, ranked: Sequence[RankedCandidate], created_at: datetime, sequence: Iterator[int]
    ) -> Optional[Suggestion]:
        if len(ranked) < 2:
            return None
        try:
            contributors = [
                candidate for candidate in ranked[:COMBINE_LIMIT] if _usable(candidate.resolution_text)
            ]
            if len(contributors) < 2:
                return None
            combined = self.combine_solutions([candidate.resolution_text for candidate in contributors])
            if len(combined) <= MIN_COMBINED_LENGTH:
                return None
            top = ranked[0]
            keyword_source = " ".join(
                f"{candidate.record.title_text or ''} {candidate.resolution_text}" for candidate in contributors
            )
            return Suggestion(
                suggestion_id=self._new_id(f"combined_{contributors[0].identifier}", created_at, sequence),
                suggested_solution_text=combined,
                confidence_score=min(COMBINED_CAP, top.similarity + COMBINED_BOOST),
                source_record_ids=[candidate.identifier for candidate in contributors],
                keywords=self.scorer.extractor.extract(keyword_source),
                created_at=created_at,
            )
        except Exception:
            self.logger.warning("Skipping combined suggestion", exc_info=True)
            return None

    @staticmethod
    def _deduplicate(suggestions: Sequence[Suggestion]) -> List[Suggestion]:
        kept: Dict[str, Suggestion] = {}
        for suggestion in suggestions:
            key = suggestion.suggested_solution_text.lower()
            existing = kept.get(key)
            if existing is None:
                kept[key] = suggestion
                continue
            for record_id in suggestion.source_record_ids:
                if record_id not in existing.source_record_ids:
                    existing.source_record_ids.append(record_id)
        return list(kept.values())

    def synthesize(self, ranked: Sequence[RankedCandidate]) -> List[Suggestion]:
        if not ranked:
            return []
        created_at = self.clock()
        sequence = itertools.count(1)
        suggestions = self._direct_suggestions(ranked, created_at, sequence)
        combined = self._combined_suggestion(ranked, created_at, sequence)
        if combined is not None:
            suggestions.append(combined)
        suggestions = [
            suggestion
            for suggestion in suggestions
            if len(suggestion.suggested_solution_text) > MIN_SUGGESTION_LENGTH
        ]
        suggestions.sort(key=lambda suggestion: suggestion.confidence_score, reverse=True)
        final = self._deduplicate(suggestions)[: self.max_suggestions]
        self.logger.info(
            "Synthesized %s suggestions from %s ranked candidates", len(final), len(ranked)
        )
        return final


def synthesize_suggestions(ranked: Sequence[RankedCandidate]) -> List[Suggestion]:
    """Synthesize suggestions with the default scorer and limits."""
    return SuggestionSynthesizer().synthesize(ranked)
