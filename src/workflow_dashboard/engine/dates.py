# workflow_dashboard/engine/dates.py

import datetime
import re
from typing import Optional

import pandas as pd

from workflow_dashboard.engine.utils import is_missing, round_half_up

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _leading_int(text: str) -> Optional[int]:
    m = _LEADING_INT.match(text)
    if not m:
        return None
    return int(m.group(1))


def _parse_iso(text: str) -> Optional[pd.Timestamp]:
    ts = pd.to_datetime(text, format="ISO8601", errors="coerce")
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def _parse_slashed(text: str) -> Optional[pd.Timestamp]:
    """
    MM/DD/YY or MM/DD/YYYY.
    Two-digit years: < 50 -> 2000s, >= 50 -> 1900s.
    """
    parts = text.split("/")
    if len(parts) != 3:
        return None

    month, day, year = (_leading_int(p) for p in parts)
    if month is None or day is None or year is None:
        return None

    if year < 100:
        year += 2000 if year < 50 else 1900

    try:
        return pd.Timestamp(year=year, month=month, day=day)
    except (ValueError, OverflowError):
        return None


def parse_date(value) -> Optional[pd.Timestamp]:
    """
    Parse a schedule cell into a naive Timestamp, or None.

    Strict ISO first ("2024-06-01", "2024-06-01T09:30:00Z"), then the
    slash-separated US form exported by spreadsheets ("6/1/24", "06/01/2024").
    Anything else is None; callers exclude such rows from date-based figures.
    """
    if is_missing(value):
        return None

    if isinstance(value, pd.Timestamp):
        return value.tz_localize(None) if value.tzinfo is not None else value
    if isinstance(value, (datetime.datetime, datetime.date)):
        return parse_date(pd.Timestamp(value))

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    parsed = _parse_iso(text)
    if parsed is not None:
        return parsed

    return _parse_slashed(text)


def parse_date_series(s: pd.Series) -> pd.Series:
    """Element-wise parse_date; unparseable cells become NaT."""
    return pd.to_datetime(s.map(parse_date), errors="coerce")


def format_date(value) -> str:
    ts = parse_date(value)
    if ts is None:
        return ""
    return ts.strftime("%m/%d/%Y")


def calculate_variance(scheduled, actual) -> int:
    """Signed whole days from the scheduled date to the actual date (0 if either is unusable)."""
    scheduled_ts = parse_date(scheduled)
    actual_ts = parse_date(actual)
    if scheduled_ts is None or actual_ts is None:
        return 0
    return round_half_up((actual_ts - scheduled_ts) / pd.Timedelta(days=1))
