# workflow_dashboard/engine/sorting.py

import math

import pandas as pd

from workflow_dashboard.config import DATE_FIELDS, ROWS_PER_PAGE
from workflow_dashboard.engine.dates import parse_date_series
from workflow_dashboard.engine.utils import as_text


def sort_records(df: pd.DataFrame, field: str, ascending: bool = True) -> pd.DataFrame:
    """
    Order the detailed report by one column.

    Date columns sort chronologically with unusable dates last; everything
    else sorts case-insensitively as text. Ties keep their current order.
    """
    if field not in df.columns:
        raise ValueError(f"Cannot sort by unknown field: {field!r}")

    if field in DATE_FIELDS:
        key = parse_date_series(df[field])
    else:
        key = df[field].map(lambda v: as_text(v).lower())

    order = key.sort_values(ascending=ascending, kind="stable", na_position="last").index
    return df.loc[order]


def page_count(n_rows: int, per_page: int = ROWS_PER_PAGE) -> int:
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    return math.ceil(n_rows / per_page)


def paginate(df: pd.DataFrame, page: int, per_page: int = ROWS_PER_PAGE) -> pd.DataFrame:
    """1-based page of rows."""
    if page < 1:
        raise ValueError(f"Page numbers start at 1, got {page}")
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    start = (page - 1) * per_page
    return df.iloc[start:start + per_page]
