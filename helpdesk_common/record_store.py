"""HTTP client for the helpdesk backend's REST tables."""
from __future__ import annotations

import logging
from typing import Any, Dict, Generator, List, Optional, Sequence
from urllib.parse import urljoin

import requests

from .models import FEEDBACK_ACTION_TYPE, FeedbackRecord, HistoricalRecord

LOGGER = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
CANDIDATE_COLUMNS = "id,title,description,resolution_notes,resolved_at,categories(name)"
FEEDBACK_COLUMNS = "ticket_id,action_details,success,triggered_at"


def describe_http_error(exc: requests.HTTPError, action: str) -> str:
    """Return a log friendly description of a failed record store call."""
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    detail = ""
    if response is not None:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            detail = payload.get("message") or payload.get("error") or ""
        if not detail:
            detail = (getattr(response, "text", "") or "").strip()[:200]
    status_text = status if status is not None else "unknown status"
    message = f"Record store request to {action} failed ({status_text})"
    return f"{message}: {detail}" if detail else message


class RecordStoreClient:
    """Wrapper around the backend tables holding tickets and automation logs."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        verify_ssl: bool = True,
        timeout: int = 30,
        tickets_table: str = "tickets",
        feedback_table: str = "automation_logs",
        resolved_statuses: Sequence[str] = ("resolved", "closed"),
        page_size: int = 500,
    ) -> None:
        self.base_url = self._normalise_base_url(base_url)
        if self.base_url.rstrip("/") != base_url.rstrip("/"):
            LOGGER.debug("Normalised record store base URL from %s to %s", base_url, self.base_url)
        self.session = requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.tickets_table = tickets_table
        self.feedback_table = feedback_table
        self.resolved_statuses = tuple(resolved_statuses)
        self.page_size = max(1, int(page_size))

    # -- Low level request helpers -------------------------------------------------
    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._build_url(path)
        LOGGER.debug("HTTP %s %s payload=%s", method, url, kwargs.get("json"))
        response = self.session.request(
            method,
            url,
            timeout=self.timeout,
            verify=self.verify_ssl,
            **kwargs,
        )
        LOGGER.debug("Response status=%s", response.status_code)
        response.raise_for_status()
        if response.content:
            return response.json()
        return {}

    def _normalise_base_url(self, base_url: str) -> str:
        """Trim the REST prefix so table paths can be joined safely."""

        cleaned = base_url.strip().rstrip("/")
        if cleaned.lower().endswith(REST_PREFIX):
            cleaned = cleaned[: -len(REST_PREFIX)]
        cleaned = cleaned.rstrip("/")
        return cleaned or base_url.rstrip("/")

    def _build_url(self, path: str) -> str:
        normalised_path = path.lstrip("/")
        base = self.base_url.rstrip("/") + "/"
        return urljoin(base, normalised_path)

    def _table_path(self, table: str) -> str:
        return f"{REST_PREFIX}/{table}"

    # -- Public API ----------------------------------------------------------------
    def fetch_candidate_records(self, limit: int = 200) -> List[HistoricalRecord]:
        """Return the most recently resolved tickets that carry resolution notes."""
        params = [
            ("select", CANDIDATE_COLUMNS),
            ("status", f"in.({','.join(self.resolved_statuses)})"),
            ("resolution_notes", "not.is.null"),
            ("resolution_notes", "neq."),
            ("order", "resolved_at.desc"),
            ("limit", str(limit)),
        ]
        payload = self._request("GET", self._table_path(self.tickets_table), params=params)
        rows = payload if isinstance(payload, list) else []
        records = [HistoricalRecord.from_api(row) for row in rows if isinstance(row, dict)]
        LOGGER.info("Fetched %s candidate records from %s", len(records), self.tickets_table)
        return records

    def append_feedback(self, record: FeedbackRecord) -> None:
        LOGGER.info(
            "Recording feedback for suggestion %s on ticket %s (helpful=%s)",
            record.suggestion_id,
            record.ticket_id,
            record.was_helpful,
        )
        self._request(
            "POST",
            self._table_path(self.feedback_table),
            json=record.to_log_entry(),
            headers={"Prefer": "return=minimal"},
        )

    def iter_feedback_records(self) -> Generator[FeedbackRecord, None, None]:
        """Yield feedback events from the automation log, one page at a time."""
        offset = 0
        while True:
            params: Dict[str, Any] = {
                "select": FEEDBACK_COLUMNS,
                "action_type": f"eq.{FEEDBACK_ACTION_TYPE}",
                "order": "triggered_at.desc",
                "limit": self.page_size,
                "offset": offset,
            }
            payload = self._request("GET", self._table_path(self.feedback_table), params=params)
            rows = payload if isinstance(payload, list) else []
            LOGGER.info("Fetched %s feedback rows at offset %s", len(rows), offset)
            for row in rows:
                record = self._parse_feedback_row(row)
                if record is not None:
                    yield record
            if len(rows) < self.page_size:
                break
            offset += len(rows)

    @staticmethod
    def _parse_feedback_row(row: Any) -> Optional[FeedbackRecord]:
        if not isinstance(row, dict):
            LOGGER.warning("Ignoring non-object feedback row %r", row)
            return None
        try:
            return FeedbackRecord.from_log_entry(row)
        except ValueError as exc:
            LOGGER.warning("Ignoring malformed feedback row for ticket %s: %s", row.get("ticket_id"), exc)
            return None
