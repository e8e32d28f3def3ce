# workflow_dashboard/engine/state.py

import logging
from typing import Any, Dict, Optional

import pandas as pd

from workflow_dashboard.config import (
    EXCEL_LOAD_ERROR,
    SMARTSHEET_EMPTY_ERROR,
    SMARTSHEET_LOAD_ERROR,
)
from workflow_dashboard.engine.filters import apply_filters, validate_filters
from workflow_dashboard.engine.hierarchy import build_hierarchy
from workflow_dashboard.engine.records import empty_frame, normalize_records
from workflow_dashboard.smartsheet import (
    SmartsheetClient,
    SmartsheetCredentials,
    SmartsheetError,
)

logger = logging.getLogger(__name__)

DATA_SOURCES = ("excel", "smartsheet")


class DashboardState:
    """
    The one in-memory snapshot a dashboard session works from.

    raw_data        normalized records of the last successful load
    processed_data  hierarchy built from raw_data
    filtered_data   apply_filters(raw_data, filters)
    filters         current criteria (sparse dict)

    Only load*/update_filters/reset_filters replace these; each replacement
    swaps in new objects rather than mutating the old ones.
    """

    def __init__(self):
        self.raw_data: pd.DataFrame = empty_frame()
        self.processed_data: Dict[str, Any] = {}
        self.filtered_data: pd.DataFrame = self.raw_data
        self.filters: Dict[str, Any] = {}
        self.error: Optional[str] = None
        self.is_loading = False
        self.data_source = "excel"
        self.smartsheet_credentials: Optional[SmartsheetCredentials] = None
        self.source_name: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return not self.raw_data.empty

    # ---------------------------------------------------------
    # LOADING
    # ---------------------------------------------------------

    def _commit(self, df: pd.DataFrame, source_name: Optional[str]):
        self.raw_data = df
        self.processed_data = build_hierarchy(df)
        self.filtered_data = df
        self.filters = {}
        self.source_name = source_name
        self.error = None

    def _fail(self, message: str) -> bool:
        self.error = message
        self.is_loading = False
        return False

    def load(self, raw_input, source_name: Optional[str] = None) -> bool:
        """
        Load an uploaded payload (flat list or nested object).

        On an unusable or empty payload the error is recorded and the
        previously loaded dataset is kept as is.
        """
        self.is_loading = True
        df = normalize_records(raw_input)

        if df.empty:
            logger.error("Failed to load data: no usable records in payload")
            return self._fail(EXCEL_LOAD_ERROR)

        self._commit(df, source_name)
        self.is_loading = False
        logger.info(f"Loaded {len(df)} records from {source_name or 'upload'}")
        return True

    def load_smartsheet(self, credentials: SmartsheetCredentials,
                        client: Optional[SmartsheetClient] = None) -> bool:
        self.is_loading = True
        client = client or SmartsheetClient()

        try:
            records = client.fetch(credentials)
        except SmartsheetError as e:
            logger.error(f"Failed to load Smartsheet data: {e.kind}: {e.message}")
            return self._fail(e.message or SMARTSHEET_LOAD_ERROR)

        if not isinstance(records, list) or not records:
            return self._fail(SMARTSHEET_EMPTY_ERROR)

        df = normalize_records(records)
        if df.empty:
            return self._fail(SMARTSHEET_EMPTY_ERROR)

        self._commit(df, f"Smartsheet {credentials.sheet_id}")
        self.smartsheet_credentials = credentials
        self.data_source = "smartsheet"
        self.is_loading = False
        return True

    # ---------------------------------------------------------
    # SOURCE SELECTION
    # ---------------------------------------------------------

    def set_data_source(self, source: str):
        if source not in DATA_SOURCES:
            raise ValueError(f"Unknown data source {source!r}; expected one of {DATA_SOURCES}")
        self.data_source = source

    def set_smartsheet_credentials(self, credentials: SmartsheetCredentials):
        self.smartsheet_credentials = credentials

    # ---------------------------------------------------------
    # FILTERING
    # ---------------------------------------------------------

    def update_filters(self, partial: Optional[Dict[str, Any]] = None, **kwargs):
        """Merge criteria into the current ones and re-filter the raw records."""
        merged = validate_filters({**self.filters, **(partial or {}), **kwargs})
        self.filters = merged
        self.filtered_data = apply_filters(self.raw_data, merged)

    def reset_filters(self):
        self.filters = {}
        self.filtered_data = self.raw_data
