# workflow_dashboard/engine/timeline.py

from typing import Any, Optional

import pandas as pd

from workflow_dashboard.engine.dates import parse_date_series
from workflow_dashboard.engine.utils import as_text, lower_text

TIMELINE_COLUMNS = ["Month", "Planned", "Actual", "Remaining"]
MILESTONE_COLUMNS = ["Unit", "ReportingStatus", "Date", "Total", "Completed", "AllComplete"]
ITEM_COLUMNS = ["Unit", "Status", "Start", "End", "Completed", "Title", "Description"]


def _is_complete(df: pd.DataFrame) -> pd.Series:
    return df["Progress"].map(lower_text) == "complete"


# ---------------------------------------------------------
# MONTHLY BURNDOWN
# ---------------------------------------------------------

def generate_timeline(df: pd.DataFrame, unit: Optional[Any] = None) -> pd.DataFrame:
    """
    Month-bucketed planned / actual / remaining counts.

    The span runs from the month of the earliest to the month of the latest
    parseable scheduled start, scheduled end or completion date.

      Planned   = records whose scheduled end is on/before the month end
      Actual    = complete records whose completion date is in the month
      Remaining = record count - Actual for that month

    Remaining is NOT a running backlog; each month subtracts only its own
    completions from the total.
    """
    items = df if unit is None else df[df["Unit"] == unit]

    start = parse_date_series(items["Scheduled Start Date"])
    end = parse_date_series(items["Scheduled End Date"])
    done = parse_date_series(items["Completion Date"])

    all_dates = pd.concat([start, end, done]).dropna()
    if all_dates.empty:
        return pd.DataFrame(columns=TIMELINE_COLUMNS)

    months = pd.period_range(all_dates.min(), all_dates.max(), freq="M")
    done_month = done.dt.to_period("M")
    complete = _is_complete(items)
    total = int(len(items))

    rows = []
    for month in months:
        next_month_start = (month + 1).start_time
        planned = int((end < next_month_start).sum())
        actual = int(((done_month == month) & complete).sum())
        rows.append({
            "Month": month.strftime("%b %Y"),
            "Planned": planned,
            "Actual": actual,
            "Remaining": total - actual,
        })

    return pd.DataFrame(rows, columns=TIMELINE_COLUMNS)


# ---------------------------------------------------------
# MILESTONES & GANTT ITEMS
# ---------------------------------------------------------

def milestones(df: pd.DataFrame) -> pd.DataFrame:
    """One milestone per (Unit, Reporting Status): latest scheduled end and completion counts."""
    if df.empty:
        return pd.DataFrame(columns=MILESTONE_COLUMNS)

    frame = pd.DataFrame({
        "Unit": df["Unit"].map(as_text),
        "ReportingStatus": df["Reporting Status"].map(as_text),
        "end": parse_date_series(df["Scheduled End Date"]),
        "complete": _is_complete(df),
    })

    out = (
        frame
        .groupby(["Unit", "ReportingStatus"], sort=False)
        .agg(
            Date=("end", "max"),
            Total=("complete", "size"),
            Completed=("complete", "sum"),
        )
        .reset_index()
    )
    out["Completed"] = out["Completed"].astype(int)
    out["AllComplete"] = out["Completed"] == out["Total"]

    out = out.sort_values("Date", kind="stable", na_position="last").reset_index(drop=True)
    return out[MILESTONE_COLUMNS]


def timeline_items(df: pd.DataFrame) -> pd.DataFrame:
    """Records with both scheduled dates usable, ordered by start (Gantt rows)."""
    if df.empty:
        return pd.DataFrame(columns=ITEM_COLUMNS)

    unit = df["Unit"].map(as_text)
    status = df["Reporting Status"].map(as_text)

    out = pd.DataFrame({
        "Unit": unit,
        "Status": status,
        "Start": parse_date_series(df["Scheduled Start Date"]),
        "End": parse_date_series(df["Scheduled End Date"]),
        "Completed": _is_complete(df),
        "Title": unit + " - " + status,
        "Description": df["Activity"].map(as_text),
    })

    out = out.dropna(subset=["Start", "End"])
    return out.sort_values("Start", kind="stable").reset_index(drop=True)[ITEM_COLUMNS]
