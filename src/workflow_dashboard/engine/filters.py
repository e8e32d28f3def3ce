# workflow_dashboard/engine/filters.py

from typing import Any, Dict, Optional

import pandas as pd

from workflow_dashboard.config import BATCH_FIELD, NO_BATCH_LABEL
from workflow_dashboard.engine.dates import parse_date, parse_date_series
from workflow_dashboard.engine.utils import as_text

# filter key -> record field
EXACT_FILTERS = {
    "component": "Component",
    "batch": BATCH_FIELD,
    "activity": "Activity",
    "reporting_status": "Reporting Status",
}

# compared after str() + strip() on both sides
TRIMMED_FILTERS = {
    "grade": "Grade/Level",
    "unit": "Unit",
    "week": "Week",
}

MEMBERSHIP_FILTERS = {
    "health_status": "Health",
    "progress_status": "Progress",
}

FILTER_KEYS = (
    list(EXACT_FILTERS)
    + list(TRIMMED_FILTERS)
    + ["assignee", "start_date", "end_date"]
    + list(MEMBERSHIP_FILTERS)
)


def validate_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    filters = dict(filters or {})
    unknown = [k for k in filters if k not in FILTER_KEYS]
    if unknown:
        raise ValueError(f"Unknown filter keys: {unknown}. Expected some of {FILTER_KEYS}")
    return filters


def _is_set(value) -> bool:
    # None, "", [] and friends impose no constraint
    if value is None:
        return False
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) > 0
    return bool(value)


def active_filter_count(filters: Optional[Dict[str, Any]]) -> int:
    return sum(1 for v in (filters or {}).values() if _is_set(v))


def _bound(value, key) -> pd.Timestamp:
    ts = parse_date(value)
    if ts is None:
        raise ValueError(f"Filter '{key}' is not a usable date: {value!r}")
    return ts


def apply_filters(df: pd.DataFrame, filters: Optional[Dict[str, Any]]) -> pd.DataFrame:
    """
    Return the rows of df matching every set criterion (logical AND).

    Always call this on the full raw frame; results are never narrowed
    incrementally from a previous filtered frame.

      component, batch, activity, reporting_status : exact equality
                                                     ("No Batch" matches empty batches)
      grade, unit, week                            : equality after strip()
      assignee                                     : substring of "Assigned to:"
      start_date / end_date                        : scheduled start >= / end <=,
                                                     unparseable dates excluded
      health_status, progress_status               : raw value in the given list
    """
    filters = validate_filters(filters)
    mask = pd.Series(True, index=df.index)

    for key, field in EXACT_FILTERS.items():
        value = filters.get(key)
        if not _is_set(value):
            continue
        if field not in df.columns:
            mask &= False
            continue
        column = df[field]
        if key == "batch":
            # rows without a batch are offered as "No Batch"
            column = column.map(lambda v: as_text(v) or NO_BATCH_LABEL)
        mask &= column == value

    for key, field in TRIMMED_FILTERS.items():
        value = filters.get(key)
        if not _is_set(value):
            continue
        wanted = str(value).strip()
        mask &= df[field].map(lambda v: as_text(v).strip()) == wanted

    assignee = filters.get("assignee")
    if _is_set(assignee):
        needle = str(assignee)
        mask &= df["Assigned to:"].map(lambda v: needle in as_text(v))

    start_bound = filters.get("start_date")
    if _is_set(start_bound):
        starts = parse_date_series(df["Scheduled Start Date"])
        mask &= (starts >= _bound(start_bound, "start_date")).fillna(False)

    end_bound = filters.get("end_date")
    if _is_set(end_bound):
        ends = parse_date_series(df["Scheduled End Date"])
        mask &= (ends <= _bound(end_bound, "end_date")).fillna(False)

    for key, field in MEMBERSHIP_FILTERS.items():
        allowed = filters.get(key)
        if not _is_set(allowed):
            continue
        mask &= df[field].isin(list(allowed))

    return df[mask.astype(bool)]
