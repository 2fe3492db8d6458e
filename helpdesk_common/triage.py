"""Heuristic category, priority and urgency assignment for new tickets."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from rapidfuzz import fuzz

from .analysis import KeywordExtractor

LOGGER = logging.getLogger(__name__)

_FUZZY_SCORE_THRESHOLD = 85
_FUZZY_MIN_LENGTH = 5
TRIAGE_KEYWORD_COUNT = 5

# Evaluated in order; the first rule with a hit wins.
CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("network", ("wifi", "internet", "rete", "connessione")),
    ("access", ("password", "accesso", "login")),
    ("hardware", ("stampante", "monitor", "mouse", "tastiera")),
    ("software", ("software", "applicazione", "programma")),
    ("email", ("email", "posta", "outlook")),
)
FALLBACK_CATEGORY = "other"

HIGH_PRIORITY_MARKERS = ("urgente", "non funziona", "bloccato")
LOW_PRIORITY_MARKERS = ("lento", "problema minore")

URGENCY_BY_PRIORITY = {"high": "immediate", "medium": "today", "low": "week"}
RESOLUTION_TIME_BY_PRIORITY = {"high": "2-4 ore", "medium": "1-2 giorni", "low": "3-5 giorni"}


@dataclass(frozen=True)
class HeuristicSolution:
    title: str
    solution: str
    confidence: float


@dataclass
class TicketAnalysis:
    category: str
    priority: str
    urgency: str
    estimated_resolution_time: str
    is_urgent: bool
    keywords: List[str] = field(default_factory=list)
    suggested_solutions: List[HeuristicSolution] = field(default_factory=list)
    rationale: str = ""


_ROUTER_RESTART = HeuristicSolution(
    title="Riavvio Router/Modem",
    solution="Spegnere il router per 30 secondi, poi riaccenderlo. Attendere 2-3 minuti per la riconnessione.",
    confidence=0.8,
)
_WIFI_CREDENTIALS = HeuristicSolution(
    title="Verifica Credenziali Wi-Fi",
    solution="Verificare nome rete e password Wi-Fi. Rimuovere e riaggiungere la rete salvata.",
    confidence=0.75,
)
_PASSWORD_RESET = HeuristicSolution(
    title="Reset Password Self-Service",
    solution="Utilizzare il portale self-service aziendale per reimpostare autonomamente la password.",
    confidence=0.9,
)
_PRINTER_CHECK = HeuristicSolution(
    title="Controllo Base Stampante",
    solution="Verificare che la stampante sia accesa, collegata alla rete e abbia carta e toner sufficienti.",
    confidence=0.85,
)
_APPLICATION_RESTART = HeuristicSolution(
    title="Riavvio Applicazione",
    solution="Chiudere completamente l'applicazione e riaprirla. Se persiste, riavviare il computer.",
    confidence=0.7,
)


class TicketTriage:
    """Classify a ticket from its wording alone."""

    def __init__(self, extractor: Optional[KeywordExtractor] = None) -> None:
        self.extractor = extractor or KeywordExtractor()
        self._fuzzy_seeds: Dict[str, str] = {
            keyword: category
            for category, keywords in CATEGORY_RULES
            for keyword in keywords
            if " " not in keyword and len(keyword) >= _FUZZY_MIN_LENGTH
        }

    def _literal_category(self, text_lower: str) -> Optional[Tuple[str, str]]:
        for category, keywords in CATEGORY_RULES:
            for keyword in keywords:
                if keyword in text_lower:
                    return category, f"keyword '{keyword}'"
        return None

    def _fuzzy_category(self, text_lower: str) -> Optional[Tuple[str, str]]:
        tokens = {token for token in self.extractor.tokenize(text_lower) if len(token) >= _FUZZY_MIN_LENGTH}
        best_score = 0.0
        best: Optional[Tuple[str, str]] = None
        # Sorted iteration keeps ties deterministic.
        for token in sorted(tokens):
            for seed, category in self._fuzzy_seeds.items():
                score = fuzz.ratio(seed, token)
                if score > best_score:
                    best_score = score
                    best = (category, f"fuzzy {token}->{seed} {score:.0f}")
        if best is None or best_score < _FUZZY_SCORE_THRESHOLD:
            return None
        return best

    @staticmethod
    def _priority(text_lower: str) -> str:
        if any(marker in text_lower for marker in HIGH_PRIORITY_MARKERS):
            return "high"
        if any(marker in text_lower for marker in LOW_PRIORITY_MARKERS):
            return "low"
        return "medium"

    @staticmethod
    def _solutions(category: str, text_lower: str) -> List[HeuristicSolution]:
        solutions: List[HeuristicSolution] = []
        if category == "network":
            solutions.append(_ROUTER_RESTART)
            if "wifi" in text_lower:
                solutions.append(_WIFI_CREDENTIALS)
        elif category == "access":
            solutions.append(_PASSWORD_RESET)
        elif category == "hardware":
            if "stampante" in text_lower:
                solutions.append(_PRINTER_CHECK)
        elif category == "software":
            solutions.append(_APPLICATION_RESTART)
        return solutions

    def analyze(self, title: str, description: str) -> TicketAnalysis:
        text_lower = f"{title or ''} {description or ''}".lower()
        match = self._literal_category(text_lower) or self._fuzzy_category(text_lower)
        category, rationale = match or (FALLBACK_CATEGORY, "no category keywords")
        priority = self._priority(text_lower)
        analysis = TicketAnalysis(
            category=category,
            priority=priority,
            urgency=URGENCY_BY_PRIORITY[priority],
            estimated_resolution_time=RESOLUTION_TIME_BY_PRIORITY[priority],
            is_urgent=priority == "high",
            keywords=self.extractor.extract(text_lower)[:TRIAGE_KEYWORD_COUNT],
            suggested_solutions=self._solutions(category, text_lower),
            rationale=rationale,
        )
        LOGGER.info(
            "Ticket triaged as %s / %s priority via %s",
            analysis.category,
            analysis.priority,
            rationale,
        )
        return analysis
