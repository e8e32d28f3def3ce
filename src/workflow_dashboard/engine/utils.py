import math
import numbers
import re

import numpy as np
import pandas as pd


def is_missing(value) -> bool:
    """True for None, NaN and NaT; never raises on containers or text."""
    if value is None or value is pd.NA:
        return True
    if isinstance(value, (float, np.floating)) and math.isnan(value):
        return True
    return value is pd.NaT


def as_text(value) -> str:
    if is_missing(value):
        return ""
    return str(value)


def lower_text(value) -> str:
    return as_text(value).lower()


_LEADING_SIGNED_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value) -> int:
    """Leading signed integer of a cell ("-3", "5 days", 2.7 -> 2); 0 when there is none."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, numbers.Number) and not is_missing(value):
        try:
            return int(value)
        except (OverflowError, TypeError, ValueError):
            return 0
    m = _LEADING_SIGNED_INT.match(as_text(value))
    return int(m.group(1)) if m else 0


def round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; dashboard figures round .5 up
    return int(math.floor(x + 0.5))


def resolve_today(today=None) -> pd.Timestamp:
    """Midnight of the injected day, or of the real clock when none is given."""
    if today is None:
        return pd.Timestamp.today().normalize()
    ts = pd.Timestamp(today)
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()
