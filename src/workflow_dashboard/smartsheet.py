# workflow_dashboard/smartsheet.py

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from workflow_dashboard.config import (
    REQUIRED_FIELDS,
    SMARTSHEET_API_BASE,
    SMARTSHEET_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, repr=False)
class SmartsheetCredentials:
    sheet_id: str
    token: str

    def __repr__(self):
        # keep tokens out of logs and tracebacks
        return f"SmartsheetCredentials(sheet_id={self.sheet_id!r}, token='***')"


class SmartsheetError(Exception):
    """
    Fetch failure with a user-facing message.

    kind: auth | not_found | rate_limited | unavailable | invalid_request | error
    """

    def __init__(self, message: str, kind: str = "error", status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status = status


def _error_for_status(status: int, detail: str) -> SmartsheetError:
    suffix = f": {detail}" if detail else ""
    if status in (401, 403):
        return SmartsheetError(f"Smartsheet rejected the API token{suffix}", "auth", status)
    if status == 404:
        return SmartsheetError(f"Sheet not found{suffix}", "not_found", status)
    if status == 429:
        return SmartsheetError(
            "Smartsheet rate limit reached. Please wait a minute and try again.",
            "rate_limited",
            status,
        )
    if status >= 500:
        return SmartsheetError(
            f"Smartsheet is currently unavailable (HTTP {status})", "unavailable", status
        )
    return SmartsheetError(f"Failed to fetch data from Smartsheet (HTTP {status}){suffix}", "error", status)


def sheet_to_records(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Convert a Smartsheet sheet document into row dicts keyed by column title.

    Every required field is present (default ""); extra columns are kept and
    left for the normalizer to drop.
    """
    if not isinstance(payload, dict) or not payload.get("rows") or not payload.get("columns"):
        logger.warning("Invalid data structure received from Smartsheet")
        return []

    titles = {col.get("id"): col.get("title") for col in payload["columns"]}

    records = []
    for row in payload["rows"]:
        item: Dict[str, Any] = {}
        for cell in row.get("cells", []):
            title = titles.get(cell.get("columnId"))
            if title is None:
                continue
            item[title] = cell.get("value") or ""
        for field in REQUIRED_FIELDS:
            if not item.get(field):
                item[field] = ""
        records.append(item)

    return records


class SmartsheetClient:
    """Thin HTTP client for GET /sheets/{id}."""

    def __init__(self, api_base: str = SMARTSHEET_API_BASE,
                 timeout: float = SMARTSHEET_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _validate(self, credentials: SmartsheetCredentials):
        sheet_id = str(credentials.sheet_id or "").strip()
        if not sheet_id:
            raise SmartsheetError("Sheet ID is required", "invalid_request")
        if not credentials.token:
            raise SmartsheetError("Smartsheet API token is required", "invalid_request")
        if not sheet_id.isdigit():
            raise SmartsheetError(
                "Invalid sheet ID format. Sheet ID should be a number", "invalid_request"
            )
        return sheet_id

    def fetch(self, credentials: SmartsheetCredentials) -> List[Dict[str, Any]]:
        sheet_id = self._validate(credentials)
        url = f"{self.api_base}/sheets/{sheet_id}"
        logger.info(f"Requesting Smartsheet sheet {sheet_id}")

        try:
            response = self.session.get(
                url,
                headers={
                    "Authorization": f"Bearer {credentials.token}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Smartsheet request failed: {e}")
            raise SmartsheetError(
                "Could not reach Smartsheet. Check your connection and try again.",
                "unavailable",
            ) from e

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("message", "") if isinstance(body, dict) else ""
            logger.error(f"Smartsheet API error: HTTP {response.status_code} {detail}")
            raise _error_for_status(response.status_code, detail)

        try:
            payload = response.json()
        except ValueError as e:
            raise SmartsheetError("Smartsheet returned a malformed response", "error") from e

        records = sheet_to_records(payload)
        logger.info(f"Retrieved {len(records)} rows from Smartsheet sheet {sheet_id}")
        return records
