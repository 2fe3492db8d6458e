"""Shared modules for the helpdesk knowledge suggestion tools."""

from .config import load_config, resolve_path
from .logging_setup import configure_logging
from .analysis import KeywordExtractor, SimilarityScorer, extract_keywords, score_similarity
from .ranking import CandidateRanker, find_similar_resolved
from .synthesis import SuggestionSynthesizer, synthesize_suggestions
from .feedback import compute_performance_stats
from .record_store import RecordStoreClient
from .service import FeedbackWriteError, KnowledgeSuggestionService
from .triage import TicketTriage
from .reporting import SuggestionReportWriter

__all__ = [
    "load_config",
    "resolve_path",
    "configure_logging",
    "KeywordExtractor",
    "SimilarityScorer",
    "extract_keywords",
    "score_similarity",
    "CandidateRanker",
    "find_similar_resolved",
    "SuggestionSynthesizer",
    "synthesize_suggestions",
    "compute_performance_stats",
    "RecordStoreClient",
    "FeedbackWriteError",
    "KnowledgeSuggestionService",
    "TicketTriage",
    "SuggestionReportWriter",
]
