"""
Utility functions for value coercion.
"""

import numpy as np
import pandas as pd

from .config import ROUND_DIGITS, ANSWER_YES, ANSWER_NO

def parse_visit_date(value):
    """Parse a visit date to a midnight ``pd.Timestamp``, or None if invalid.

    Accepts ISO strings, ``date``/``datetime`` objects and Timestamps.  Time
    of day is dropped because every aggregation buckets by calendar day.
    Timezone-aware values are converted to naive local wall time.
    """
    if value is None:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    try:
        ts = pd.to_datetime(value, errors='coerce')
    except (TypeError, ValueError, OverflowError):
        return None
    if not isinstance(ts, pd.Timestamp) or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()

def to_number(value):
    """Return ``value`` as a finite float, or None when absent / non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(number):
        return None
    return number

def to_count(value):
    """Like ``to_number`` but for head counts: None or a non-negative int."""
    number = to_number(value)
    if number is None or number < 0:
        return None
    return int(number)

def round_value(value, digits=ROUND_DIGITS):
    """Round a float for display, passing None through."""
    if value is None:
        return None
    return round(float(value), digits)

def normalize_answer(value):
    """Normalise a yes/no survey answer.

    Returns ``'yes'``, ``'no'`` or None.  Booleans are accepted because some
    exports store the survey columns as true/false.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return ANSWER_YES if value else ANSWER_NO
    if isinstance(value, float) and np.isnan(value):
        return None
    answer = str(value).strip().lower()
    if answer in (ANSWER_YES, ANSWER_NO):
        return answer
    return None

def clean_label(value):
    """Strip a free-text label; blank or missing values become None."""
    if value is None:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    text = str(value).replace('\xa0', ' ').strip()
    return text or None


def to_id(value):
    """Normalise an identifier cell to a string, or None when blank.

    Integer ids read back as floats when the column also holds blanks
    (``1`` becomes ``1.0``); whole floats are turned back into ints so that
    ``id`` and ``reports_to`` columns produce matching strings.
    """
    if value is None:
        return None
    if isinstance(value, (float, np.floating)):
        if np.isnan(value):
            return None
        if float(value).is_integer():
            return str(int(value))
    return clean_label(value)
