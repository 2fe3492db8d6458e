"""Keyword extraction and text similarity for resolved-ticket matching."""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)
NON_WORD_PATTERN = re.compile(r"[^a-z0-9À-ÿ]+")

DEFAULT_STOP_WORDS = (
    "che",
    "per",
    "con",
    "del",
    "della",
    "dei",
    "delle",
    "gli",
    "una",
    "nel",
    "alla",
    "non",
    "come",
    "anche",
    "questo",
    "questa",
    "quella",
    "sono",
    "essere",
    "fare",
    "dire",
    "problema",
    "aiuto",
    "grazie",
    "prego",
)

DEFAULT_TECHNICAL_TERMS = (
    "ipos",
    "pos",
    "update",
    "aggiornamento",
    "error",
    "errore",
    "system",
    "sistema",
    "software",
    "server",
    "database",
    "driver",
    "vpn",
    "outlook",
    "windows",
)

# Multi-word product names survive tokenisation only as substrings.
DEFAULT_PHRASE_BONUSES: Tuple[Tuple[str, float], ...] = (
    ("ipos", 0.3),
    ("punto cassa", 0.2),
)

DEFAULT_MAX_KEYWORDS = 15
DEFAULT_MIN_TOKEN_LENGTH = 3
DEFAULT_TECHNICAL_WEIGHT = 3
DEFAULT_TECHNICAL_BONUS = 0.2


class KeywordExtractor:
    """Turn free text into its most significant terms.

    Technical terms count ``technical_weight`` times per occurrence. Ties keep
    first-occurrence order, so the output for a given text never changes.
    """

    def __init__(
        self,
        *,
        stop_words: Optional[Iterable[str]] = None,
        technical_terms: Optional[Iterable[str]] = None,
        min_token_length: int = DEFAULT_MIN_TOKEN_LENGTH,
        technical_weight: int = DEFAULT_TECHNICAL_WEIGHT,
        max_keywords: int = DEFAULT_MAX_KEYWORDS,
    ) -> None:
        source_stop_words = DEFAULT_STOP_WORDS if stop_words is None else stop_words
        source_terms = DEFAULT_TECHNICAL_TERMS if technical_terms is None else technical_terms
        self.stop_words = frozenset(word.lower() for word in source_stop_words)
        self.technical_terms = frozenset(term.lower() for term in source_terms)
        self.min_token_length = max(1, int(min_token_length))
        self.technical_weight = max(1, int(technical_weight))
        self.max_keywords = max(1, int(max_keywords))

    @classmethod
    def from_config(cls, suggestions_cfg: Mapping[str, Any]) -> "KeywordExtractor":
        return cls(
            stop_words=suggestions_cfg.get("stop_words"),
            technical_terms=suggestions_cfg.get("technical_terms"),
            min_token_length=int(suggestions_cfg.get("min_token_length", DEFAULT_MIN_TOKEN_LENGTH)),
            technical_weight=int(suggestions_cfg.get("technical_weight", DEFAULT_TECHNICAL_WEIGHT)),
            max_keywords=int(suggestions_cfg.get("max_keywords", DEFAULT_MAX_KEYWORDS)),
        )

    def is_technical(self, token: str) -> bool:
        return token in self.technical_terms

    def tokenize(self, text: str | None) -> List[str]:
        words = NON_WORD_PATTERN.sub(" ", (text or "").lower()).split()
        return [
            word
            for word in words
            if len(word) >= self.min_token_length and word not in self.stop_words
        ]

    def weighted_counts(self, text: str | None) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for token in self.tokenize(text):
            weight = self.technical_weight if self.is_technical(token) else 1
            counts[token] = counts.get(token, 0) + weight
        return counts

    def extract(self, text: str | None) -> List[str]:
        counts = self.weighted_counts(text)
        ranked = sorted(counts, key=lambda token: counts[token], reverse=True)
        keywords = ranked[: self.max_keywords]
        LOGGER.debug("Extracted %s keywords from %s distinct tokens", len(keywords), len(counts))
        return keywords


class SimilarityScorer:
    """Jaccard overlap of keyword sets plus bonuses for technical matches.

    The score is ``min(1.0, jaccard + technical + phrase)`` where every shared
    technical term adds ``technical_bonus`` and every configured phrase found
    in both texts adds its own bonus.
    """

    def __init__(
        self,
        extractor: Optional[KeywordExtractor] = None,
        *,
        technical_bonus: float = DEFAULT_TECHNICAL_BONUS,
        phrase_bonuses: Optional[Iterable[Tuple[str, float]] | Mapping[str, float]] = None,
    ) -> None:
        self.extractor = extractor or KeywordExtractor()
        self.technical_bonus = max(0.0, float(technical_bonus))
        if phrase_bonuses is None:
            phrase_bonuses = DEFAULT_PHRASE_BONUSES
        if isinstance(phrase_bonuses, Mapping):
            phrase_bonuses = phrase_bonuses.items()
        self.phrase_bonuses: Tuple[Tuple[str, float], ...] = tuple(
            (phrase.lower(), max(0.0, float(bonus))) for phrase, bonus in phrase_bonuses if phrase
        )

    @classmethod
    def from_config(
        cls, suggestions_cfg: Mapping[str, Any], extractor: Optional[KeywordExtractor] = None
    ) -> "SimilarityScorer":
        return cls(
            extractor or KeywordExtractor.from_config(suggestions_cfg),
            technical_bonus=float(suggestions_cfg.get("technical_bonus", DEFAULT_TECHNICAL_BONUS)),
            phrase_bonuses=suggestions_cfg.get("phrase_bonuses"),
        )

    @staticmethod
    def jaccard(left: set[str], right: set[str]) -> float:
        union = left | right
        if not union:
            return 0.0
        return len(left & right) / len(union)

    def technical_score(self, shared: Iterable[str]) -> float:
        hits = sum(1 for token in shared if self.extractor.is_technical(token))
        return hits * self.technical_bonus

    def phrase_score(self, text_a: str, text_b: str) -> float:
        lower_a = text_a.lower()
        lower_b = text_b.lower()
        return sum(bonus for phrase, bonus in self.phrase_bonuses if phrase in lower_a and phrase in lower_b)

    def score(self, text_a: str | None, text_b: str | None) -> float:
        text_a = text_a or ""
        text_b = text_b or ""
        normalised_a = text_a.strip().lower()
        if normalised_a and normalised_a == text_b.strip().lower():
            return 1.0
        keywords_a = set(self.extractor.extract(text_a))
        keywords_b = set(self.extractor.extract(text_b))
        shared = keywords_a & keywords_b
        jaccard = self.jaccard(keywords_a, keywords_b)
        technical = self.technical_score(shared)
        phrase = self.phrase_score(text_a, text_b)
        score = min(1.0, jaccard + technical + phrase)
        LOGGER.debug(
            "Similarity %.3f (jaccard=%.3f technical=%.2f phrase=%.2f shared=%s)",
            score,
            jaccard,
            technical,
            phrase,
            sorted(shared),
        )
        return score


_DEFAULT_EXTRACTOR = KeywordExtractor()
_DEFAULT_SCORER = SimilarityScorer(_DEFAULT_EXTRACTOR)


def extract_keywords(text: str | None) -> List[str]:
    """Extract keywords with the built-in vocabulary tables."""
    return _DEFAULT_EXTRACTOR.extract(text)


def score_similarity(text_a: str | None, text_b: str | None) -> float:
    """Score two texts with the built-in vocabulary tables."""
    return _DEFAULT_SCORER.score(text_a, text_b)
