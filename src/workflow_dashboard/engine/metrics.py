# workflow_dashboard/engine/metrics.py

from __future__ import annotations

import numbers
import re
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from workflow_dashboard.config import (
    DELAY_FLAG_THRESHOLD_DAYS,
    DELAY_INDICATORS,
    GROUP_ALERT_THRESHOLD,
    HEALTH_COLORS,
    HEALTH_NEUTRAL_COLOR,
    UNASSIGNED,
    UNKNOWN_ACTIVITY,
)
from workflow_dashboard.engine.dates import parse_date, parse_date_series
from workflow_dashboard.engine.utils import (
    as_text,
    is_missing,
    lower_text,
    parse_int,
    resolve_today,
    round_half_up,
)

_FIRST_INT = re.compile(r"(\d+)")


# ---------------------------------------------------------
# PER-RECORD HELPERS
# ---------------------------------------------------------

def _progress(record) -> str:
    return lower_text(record.get("Progress"))


def _health(record) -> str:
    return lower_text(record.get("Health"))


def _rows(df: pd.DataFrame):
    return df.to_dict("records")


def progress_percentage(value) -> float:
    """
    Map a progress-like cell to 0–100.

      "complete" (any case)        -> 100
      number (fraction, 0.73)      -> 73, clamped
      "in progress" / "not started" -> 50 / 0
      text with digits ("45%")     -> first integer, clamped
      anything else                -> 0
    """
    if is_missing(value) or isinstance(value, bool) or not value:
        return 0

    if isinstance(value, str) and value.lower() == "complete":
        return 100

    if isinstance(value, numbers.Number):
        return min(max(float(value) * 100, 0.0), 100.0)

    if not isinstance(value, str):
        return 0

    text = value.lower()
    if text == "in progress":
        return 50
    if text == "not started":
        return 0

    m = _FIRST_INT.search(text)
    if m:
        return min(max(int(m.group(1)), 0), 100)
    return 0


def record_completion(record) -> float:
    """Completion of one record: a complete Progress wins over any % Complete value."""
    if _progress(record) == "complete":
        return 100
    return progress_percentage(record.get("% Complete"))


# ---------------------------------------------------------
# DELAY / RISK
# ---------------------------------------------------------

def is_delayed(record, today=None) -> bool:
    """
    Not started past its scheduled start, or in progress past its scheduled
    end. A record whose scheduled start is still ahead is never delayed.
    """
    today = resolve_today(today)
    start = parse_date(record.get("Scheduled Start Date"))
    if start is None or start > today:
        return False

    progress = _progress(record)
    if progress == "not started":
        return start < today
    if progress == "in progress":
        end = parse_date(record.get("Scheduled End Date"))
        return end is not None and end < today
    return False


def delay_days(record, today=None) -> int:
    """Whole days past the relevant boundary (start if not started, end if in progress)."""
    today = resolve_today(today)
    if not is_delayed(record, today):
        return 0

    if _progress(record) == "not started":
        boundary = parse_date(record.get("Scheduled Start Date"))
    else:
        boundary = parse_date(record.get("Scheduled End Date"))

    return max((today - boundary).days, 0)


def delay_severity(record, today=None) -> Optional[str]:
    today = resolve_today(today)
    if not is_delayed(record, today):
        return None
    if delay_days(record, today) > DELAY_FLAG_THRESHOLD_DAYS:
        return "flag"
    return "alert"


def delay_indicator(record, today=None) -> str:
    return DELAY_INDICATORS.get(delay_severity(record, today), "")


def is_at_risk(record, today=None) -> bool:
    return _health(record) == "red" or is_delayed(record, today)


def at_risk_mask(df: pd.DataFrame, today=None) -> pd.Series:
    today = resolve_today(today)
    return pd.Series(
        [is_at_risk(r, today) for r in _rows(df)], index=df.index, dtype=bool
    )


def count_delayed_items(df: pd.DataFrame, today=None) -> Dict[str, int]:
    today = resolve_today(today)
    flags = alerts = 0
    for r in _rows(df):
        severity = delay_severity(r, today)
        if severity == "flag":
            flags += 1
        elif severity == "alert":
            alerts += 1
    return {"flags": flags, "alerts": alerts}


def should_show_group_alert(df: pd.DataFrame, level: str, today=None) -> bool:
    """
    Highlight a hierarchy group.

    unit/status levels: more than one week in the group has over
    GROUP_ALERT_THRESHOLD flags or alerts. Other levels: the group itself does.
    """
    today = resolve_today(today)

    def _noisy(frame):
        counts = count_delayed_items(frame, today)
        return counts["flags"] > GROUP_ALERT_THRESHOLD or counts["alerts"] > GROUP_ALERT_THRESHOLD

    if level in ("unit", "status"):
        if df.empty:
            return False
        noisy_weeks = sum(
            1 for _, week_df in df.groupby("Week", sort=False) if _noisy(week_df)
        )
        return noisy_weeks > 1

    return _noisy(df)


# ---------------------------------------------------------
# COUNTS
# ---------------------------------------------------------

def count_by_status(df: pd.DataFrame, today=None) -> Dict[str, int]:
    progress = df["Progress"].map(lower_text)
    return {
        "complete": int((progress == "complete").sum()),
        "in_progress": int((progress == "in progress").sum()),
        "not_started": int((progress == "not started").sum()),
        "at_risk": int(at_risk_mask(df, today).sum()),
    }


def health_counts(df: pd.DataFrame) -> Dict[str, int]:
    health = df["Health"].map(lower_text)
    green = int((health == "green").sum())
    yellow = int((health == "yellow").sum())
    red = int((health == "red").sum())
    return {
        "green": green,
        "yellow": yellow,
        "red": red,
        "blank": int(len(df)) - green - yellow - red,
    }


def variance_buckets(df: pd.DataFrame) -> Dict[str, int]:
    """negative = ahead of schedule, zero = on track, positive = behind."""
    # sign taken on Python ints; cells may exceed the int64 range
    signs = np.array(
        [(v > 0) - (v < 0) for v in map(parse_int, df["Variance"].tolist())], dtype=int
    )
    return {
        "negative": int((signs < 0).sum()),
        "zero": int((signs == 0).sum()),
        "positive": int((signs > 0).sum()),
    }


def average_completion(df: pd.DataFrame) -> int:
    if df.empty:
        return 0
    values = [record_completion(r) for r in _rows(df)]
    return round_half_up(float(np.mean(values)))


def _percent_of(count: int, total: int) -> int:
    return round_half_up(count / total * 100) if total > 0 else 0


# ---------------------------------------------------------
# AGGREGATE VIEWS
# ---------------------------------------------------------

def calculate_metrics(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Detail metrics for the current (filtered) record set:
      - total / completed / in-progress / not-started item counts
      - health counts (green, yellow, red, blank)
      - average completion (0–100, rounded)
      - workflows per assignee cell ("Unassigned" when blank)
      - due-date distribution keyed YYYY-MM-DD
      - variance buckets
    """
    status = count_by_status(df)

    by_assignee: Dict[str, int] = {}
    for cell in df["Assigned to:"].tolist():
        key = as_text(cell) or UNASSIGNED
        by_assignee[key] = by_assignee.get(key, 0) + 1

    due_dates: Dict[str, int] = {}
    for end in parse_date_series(df["Scheduled End Date"]).dropna():
        key = end.strftime("%Y-%m-%d")
        due_dates[key] = due_dates.get(key, 0) + 1

    return {
        "total_items": int(len(df)),
        "completed_items": status["complete"],
        "in_progress_items": status["in_progress"],
        "not_started_items": status["not_started"],
        "health_status": health_counts(df),
        "average_completion": average_completion(df),
        "workflows_by_assignee": by_assignee,
        "due_date_distribution": due_dates,
        "variance": variance_buckets(df),
    }


def summary_metrics(df: pd.DataFrame, today=None) -> Dict[str, int]:
    """Headline counts and schedule-status percentages for the overview strip."""
    total = int(len(df))
    status = count_by_status(df, today)
    variance = variance_buckets(df)

    return {
        "total": total,
        "completed": status["complete"],
        "in_progress": status["in_progress"],
        "not_started": status["not_started"],
        "at_risk": status["at_risk"],
        "completion": _percent_of(status["complete"], total),
        "on_track": _percent_of(variance["zero"], total),
        "behind_schedule": _percent_of(variance["positive"], total),
        "ahead_of_schedule": _percent_of(variance["negative"], total),
    }


def component_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per component: actual and baseline date envelope plus summed variance."""
    columns = ["Component", "StartDate", "EndDate", "BaselineStart", "BaselineFinish", "Variance"]
    if df.empty:
        return pd.DataFrame(columns=columns)

    frame = pd.DataFrame({
        "Component": df["Component"].map(as_text),
        "start": parse_date_series(df["Scheduled Start Date"]),
        "end": parse_date_series(df["Scheduled End Date"]),
        "bl_start": parse_date_series(df["Baseline Start"]),
        "bl_finish": parse_date_series(df["Baseline Finish"]),
        "variance": pd.Series(
            [parse_int(v) for v in df["Variance"].tolist()], index=df.index, dtype=object
        ),
    })

    out = (
        frame
        .groupby("Component", sort=False)
        .agg(
            StartDate=("start", "min"),
            EndDate=("end", "max"),
            BaselineStart=("bl_start", "min"),
            BaselineFinish=("bl_finish", "max"),
            Variance=("variance", "sum"),
        )
        .reset_index()
    )
    return out[columns]


def activity_distribution(df: pd.DataFrame) -> pd.DataFrame:
    activities = df["Activity"].map(lambda a: as_text(a) or UNKNOWN_ACTIVITY)
    counts = activities.value_counts(sort=False)
    out = counts.rename_axis("Activity").reset_index(name="Count")
    return out.sort_values("Count", ascending=False, kind="stable").reset_index(drop=True)


def health_color(health) -> str:
    return HEALTH_COLORS.get(lower_text(health), HEALTH_NEUTRAL_COLOR)
