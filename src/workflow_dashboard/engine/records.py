# workflow_dashboard/engine/records.py

import json
import logging
from collections import deque
from typing import Any, Dict, List

import pandas as pd

from workflow_dashboard.config import (
    BATCH_FIELD,
    NESTED_LEVELS,
    NO_BATCH_LABEL,
    REQUIRED_FIELDS,
)
from workflow_dashboard.engine.utils import as_text, is_missing

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# FIELD CLEANUP
# ---------------------------------------------------------


def _clean_value(value):
    # Falsy cells (None, "", 0, []) collapse to the canonical empty string
    if is_missing(value) or not value:
        return ""
    # Arrays/objects become their JSON text so every cell stays hashable
    if isinstance(value, (list, tuple, dict, set)):
        return json.dumps(value, default=str)
    return value


def normalize_record(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Project one loosely-typed row onto the record schema.

    Every required field is present (default ""); unknown keys are dropped.
    Batch is carried only when the row has the key. A Batch of None (JSON
    null) counts as present-but-empty; NaN, which pandas uses for rows that
    never had the key, counts as absent.
    """
    record = {field: _clean_value(item.get(field)) for field in REQUIRED_FIELDS}

    if BATCH_FIELD in item:
        batch = item[BATCH_FIELD]
        if batch is None or not is_missing(batch):
            record[BATCH_FIELD] = _clean_value(batch)

    return record


def empty_frame() -> pd.DataFrame:
    return pd.DataFrame(columns=REQUIRED_FIELDS, dtype=object)


def _to_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    if not rows:
        return empty_frame()

    columns = list(REQUIRED_FIELDS)
    if any(BATCH_FIELD in row for row in rows):
        columns.append(BATCH_FIELD)

    return pd.DataFrame(rows, columns=columns, dtype=object)


# ---------------------------------------------------------
# INPUT SHAPES
# ---------------------------------------------------------


def _normalize_flat(items) -> List[Dict[str, Any]]:
    rows = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning(f"Skipping entry {idx}: expected an object, got {type(item).__name__}")
            continue
        rows.append(normalize_record(item))
    return rows


def _normalize_nested(tree: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Walk Component -> Grade -> Unit -> Week -> [records] breadth-first.

    Every leaf sits at the same depth, so breadth-first order equals the
    document order of the leaves. Path values overwrite same-named fields
    on the entry.
    """
    depth = len(NESTED_LEVELS)
    rows = []
    queue = deque([((), tree)])

    while queue:
        path, node = queue.popleft()

        if len(path) == depth:
            if not isinstance(node, list):
                logger.warning(f"Skipping {'/'.join(path)}: week level is not a list")
                continue
            stamp = dict(zip(NESTED_LEVELS, path))
            for entry in node:
                if not isinstance(entry, dict):
                    logger.warning(f"Skipping non-object entry under {'/'.join(path)}")
                    continue
                rows.append(normalize_record({**entry, **stamp}))
            continue

        if not isinstance(node, dict):
            logger.warning(f"Skipping {'/'.join(path) or '<root>'}: expected an object")
            continue

        for key, child in node.items():
            queue.append((path + (str(key),), child))

    return rows


def normalize_records(raw) -> pd.DataFrame:
    """
    Convert an uploaded/fetched payload into the canonical record frame.

    Accepts:
      - a list of row objects (flat export)
      - a nested {component: {grade: {unit: {week: [rows]}}}} object
      - an already-built DataFrame

    Anything else is logged and yields an empty frame; the caller decides
    whether an empty result is a failed load.
    """
    if isinstance(raw, pd.DataFrame):
        rows = _normalize_flat(raw.to_dict("records"))
    elif isinstance(raw, (list, tuple)):
        rows = _normalize_flat(raw)
    elif isinstance(raw, dict):
        rows = _normalize_nested(raw)
    else:
        logger.error(f"Could not parse data: invalid format ({type(raw).__name__})")
        return empty_frame()

    df = _to_frame(rows)
    logger.info(f"Normalized {len(df)} workflow records")
    return df


# ---------------------------------------------------------
# FRAME HELPERS
# ---------------------------------------------------------


def records_from_frame(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Row dicts, dropping the Batch key from rows that never had one."""
    out = []
    for row in df.to_dict("records"):
        if BATCH_FIELD in row and is_missing(row[BATCH_FIELD]):
            del row[BATCH_FIELD]
        out.append(row)
    return out


def has_batch(df: pd.DataFrame) -> bool:
    """
    Batch level decision for the whole dataset.

    Only the FIRST record is inspected: a dataset whose first row lacks the
    Batch key builds a Batch-less hierarchy even if later rows have one.
    """
    if df.empty or BATCH_FIELD not in df.columns:
        return False
    return not is_missing(df[BATCH_FIELD].iloc[0])


def split_assignees(value) -> List[str]:
    return [name.strip() for name in as_text(value).split(",") if name.strip()]


def _unique(values) -> list:
    return list(dict.fromkeys(values))


def filter_options(df: pd.DataFrame) -> Dict[str, list]:
    """Distinct values per filter dimension, in first-seen order."""
    if df.empty:
        return {
            "components": [], "batches": [], "grades": [], "units": [],
            "weeks": [], "activities": [], "reporting_statuses": [],
            "assignees": [],
        }

    batches = []
    if has_batch(df):
        batches = _unique(
            as_text(b) or NO_BATCH_LABEL for b in df[BATCH_FIELD].tolist()
        )

    assignees = _unique(
        name
        for cell in df["Assigned to:"].tolist()
        for name in split_assignees(cell)
    )

    return {
        "components": _unique(df["Component"].tolist()),
        "batches": batches,
        "grades": _unique(df["Grade/Level"].tolist()),
        "units": _unique(df["Unit"].tolist()),
        "weeks": _unique(df["Week"].tolist()),
        "activities": _unique(df["Activity"].tolist()),
        "reporting_statuses": _unique(df["Reporting Status"].tolist()),
        "assignees": assignees,
    }
