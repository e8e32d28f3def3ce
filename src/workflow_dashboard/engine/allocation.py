# workflow_dashboard/engine/allocation.py

import numbers
import re
from typing import Any, Dict

import pandas as pd

from workflow_dashboard.config import OVERALLOCATION_THRESHOLD_DAYS, UNASSIGNED
from workflow_dashboard.engine.dates import parse_date
from workflow_dashboard.engine.records import split_assignees
from workflow_dashboard.engine.utils import as_text, is_missing, lower_text

ALLOCATION_COLUMNS = [
    "Assignee",
    "DaysAllocated",
    "Tasks",
    "Activities",
    "SharedTasks",
    "Completed",
    "InProgress",
    "NotStarted",
]

_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


def _parse_float(value) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Number) and not is_missing(value):
        return float(value)
    m = _LEADING_FLOAT.match(as_text(value))
    return float(m.group(1)) if m else 0.0


def task_duration_days(record) -> int:
    """Scheduled end minus start in whole days (truncated); 0 when either date is unusable."""
    start = parse_date(record.get("Scheduled Start Date"))
    end = parse_date(record.get("Scheduled End Date"))
    if start is None or end is None:
        return 0
    return int((end - start) / pd.Timedelta(days=1))


def shared_task_key(record) -> str:
    return f"{as_text(record.get('Component'))}-{as_text(record.get('Activity'))}-{as_text(record.get('Week'))}"


def resource_allocation(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Duration-weighted workload per person.

    Each record's scheduled duration is split evenly across the names in
    "Assigned to:". Records with unusable dates add 0 days but still count
    as a task for each assignee. A record with two or more names is a
    shared task, registered once under Component-Activity-Week.

    Returns:
      allocation_df:   one row per assignee, DaysAllocated descending
      shared_tasks:    set of shared-task keys
      total_assignees: int
      overallocated:   assignees above OVERALLOCATION_THRESHOLD_DAYS
    """
    stats: Dict[str, Dict[str, Any]] = {}
    shared_tasks = set()

    for record in df.to_dict("records"):
        names = split_assignees(record.get("Assigned to:"))
        if not names:
            continue

        is_shared = len(names) > 1
        if is_shared:
            shared_tasks.add(shared_task_key(record))

        share = task_duration_days(record) / len(names)
        progress = lower_text(record.get("Progress"))

        for name in names:
            s = stats.setdefault(name, {
                "Assignee": name,
                "DaysAllocated": 0.0,
                "Tasks": 0,
                "activities": set(),
                "SharedTasks": 0,
                "Completed": 0,
                "InProgress": 0,
                "NotStarted": 0,
            })
            s["DaysAllocated"] += share
            s["Tasks"] += 1
            s["activities"].add(as_text(record.get("Activity")))
            s["SharedTasks"] += int(is_shared)
            s["Completed"] += int(progress == "complete")
            s["InProgress"] += int(progress == "in progress")
            s["NotStarted"] += int(progress == "not started")

    rows = []
    for s in stats.values():
        row = {k: v for k, v in s.items() if k != "activities"}
        row["Activities"] = len(s["activities"])
        rows.append(row)

    allocation_df = pd.DataFrame(rows, columns=ALLOCATION_COLUMNS)
    if not allocation_df.empty:
        allocation_df = allocation_df.sort_values(
            "DaysAllocated", ascending=False, kind="stable"
        ).reset_index(drop=True)

    overallocated = int((allocation_df["DaysAllocated"] > OVERALLOCATION_THRESHOLD_DAYS).sum())

    return {
        "allocation_df": allocation_df,
        "shared_tasks": shared_tasks,
        "total_assignees": int(len(allocation_df)),
        "overallocated": overallocated,
    }


def allocation_by_percent(df: pd.DataFrame) -> pd.DataFrame:
    """Sum of the "% Allocation" column per assignee cell, descending."""
    totals: Dict[str, float] = {}
    for record in df.to_dict("records"):
        key = as_text(record.get("Assigned to:")) or UNASSIGNED
        totals[key] = totals.get(key, 0.0) + _parse_float(record.get("% Allocation"))

    out = pd.DataFrame(
        [{"Assignee": k, "Allocation": v} for k, v in totals.items()],
        columns=["Assignee", "Allocation"],
    )
    return out.sort_values("Allocation", ascending=False, kind="stable").reset_index(drop=True)
