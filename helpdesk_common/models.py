"""Records exchanged between the record store and the suggestion pipeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

LOGGER = logging.getLogger(__name__)

FEEDBACK_ACTION_TYPE = "ml_feedback"


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an API timestamp into an aware UTC datetime."""
    if not value:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        dt = date_parser.isoparse(str(value))
    except (ValueError, TypeError):
        LOGGER.debug("Unable to parse datetime value %r", value)
        return None
    return ensure_utc(dt)


def _format_timestamp(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


@dataclass
class HistoricalRecord:
    """A resolved ticket read from the record store."""

    identifier: str
    title_text: str
    body_text: str
    resolution_text: Optional[str]
    resolved_at: Optional[datetime] = None
    category_label: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "HistoricalRecord":
        category = payload.get("categories")
        if isinstance(category, dict):
            category_label = category.get("name")
        else:
            category_label = payload.get("category")
        return cls(
            identifier=str(payload.get("id", "")),
            title_text=payload.get("title") or "",
            body_text=payload.get("description") or "",
            resolution_text=payload.get("resolution_notes"),
            resolved_at=parse_timestamp(payload.get("resolved_at")),
            category_label=category_label,
        )

    @property
    def issue_text(self) -> str:
        return f"{self.title_text or ''} {self.body_text or ''}"

    def has_resolution(self) -> bool:
        return bool(self.resolution_text and self.resolution_text.strip())


@dataclass
class RankedCandidate:
    record: HistoricalRecord
    similarity: float

    @property
    def identifier(self) -> str:
        return self.record.identifier

    @property
    def resolution_text(self) -> str:
        return self.record.resolution_text or ""


@dataclass
class Suggestion:
    """A solution proposal built from one or more resolved tickets."""

    suggestion_id: str
    suggested_solution_text: str
    confidence_score: float
    source_record_ids: List[str]
    keywords: List[str]
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggestion_id": self.suggestion_id,
            "suggested_solution_text": self.suggested_solution_text,
            "confidence_score": self.confidence_score,
            "source_record_ids": list(self.source_record_ids),
            "keywords": list(self.keywords),
            "created_at": _format_timestamp(self.created_at),
        }


@dataclass
class FeedbackRecord:
    """A single helpful / not helpful vote on a suggestion."""

    suggestion_id: str
    ticket_id: str
    was_helpful: bool
    feedback_text: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_log_entry(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "action_type": FEEDBACK_ACTION_TYPE,
            "action_details": {
                "suggestion_id": self.suggestion_id,
                "was_helpful": self.was_helpful,
                "feedback": self.feedback_text or None,
                "timestamp": _format_timestamp(self.timestamp),
            },
            "success": self.was_helpful,
        }

    @classmethod
    def from_log_entry(cls, payload: Dict[str, Any]) -> "FeedbackRecord":
        """Build a record from an automation log row.

        The row's ``triggered_at`` column wins over the timestamp stored in
        ``action_details``; a row carrying neither is rejected with
        ``ValueError``.
        """
        details = payload.get("action_details") or {}
        if not isinstance(details, dict):
            raise ValueError(f"action_details must be a mapping, got {type(details).__name__}")
        timestamp = parse_timestamp(payload.get("triggered_at")) or parse_timestamp(
            details.get("timestamp")
        )
        if timestamp is None:
            raise ValueError("feedback entry has no usable timestamp")
        was_helpful = payload.get("success")
        if was_helpful is None:
            was_helpful = details.get("was_helpful", False)
        return cls(
            suggestion_id=str(details.get("suggestion_id") or ""),
            ticket_id=str(payload.get("ticket_id") or ""),
            was_helpful=bool(was_helpful),
            feedback_text=details.get("feedback"),
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class PerformanceStats:
    total: int
    helpful: int
    accuracy_rate_percent: float
    last_week_count: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "helpful": self.helpful,
            "accuracy_rate_percent": self.accuracy_rate_percent,
            "last_week_count": self.last_week_count,
        }
