"""
Timeframe resolution.

Converts the symbolic timeframe buttons of the analytics pages ("Past Week",
"Last 3 Months", ...) into a concrete half-open ``DateWindow`` anchored to
``now``:

    start = midnight of (now - offset)
    end   = midnight of the day after now   (so all of today is included)

Offsets are calendar offsets (``pandas.DateOffset``), so "past month" on
31 March starts on 28/29 February.

The date-range picker on the filter bars is covered by ``explicit_window``,
which turns an inclusive from/to day pair into the same half-open form.
"""

import logging
from typing import List, Optional, Tuple

import pandas as pd

from ..core.config import TIMEFRAME_OFFSETS, TIMEFRAME_LABELS
from ..core.utils import parse_visit_date
from ..models.data_models import DateWindow

logger = logging.getLogger(__name__)

ONE_DAY = pd.Timedelta(days=1)


def _anchor(now) -> pd.Timestamp:
    ts = pd.Timestamp.now() if now is None else pd.Timestamp(now)
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def resolve_timeframe(token: str, now=None) -> DateWindow:
    """
    Resolve a timeframe token to ``[start, end)``.

    Args:
        token: One of the keys of ``TIMEFRAME_OFFSETS`` (e.g. ``'past_month'``).
        now: Reference instant; defaults to the current local time.

    Returns:
        DateWindow.  If the computed start falls after the end the window is
        returned as-is and reports ``is_empty``; every filter then matches
        nothing.

    Raises:
        ValueError: for an unknown token.
    """
    try:
        offset = TIMEFRAME_OFFSETS[token]
    except KeyError:
        raise ValueError(
            f"Unknown timeframe '{token}'. Supported: {list(TIMEFRAME_OFFSETS)}"
        ) from None

    now_ts = _anchor(now)
    end = now_ts.normalize() + ONE_DAY
    start = (now_ts - pd.DateOffset(**offset)).normalize()

    window = DateWindow(start=start, end=end)
    if window.is_empty:
        logger.warning(f"Timeframe '{token}' resolved to an empty window: {start} > {end}")
    return window


def explicit_window(start_date=None, end_date=None) -> Optional[DateWindow]:
    """
    Window for a picked date range, both days inclusive.

    Either bound may be omitted (open-ended).  With neither bound there is
    no time filter and None is returned.

    Raises:
        ValueError: if a given bound cannot be parsed as a date.
    """
    if start_date is None and end_date is None:
        return None

    start = None
    if start_date is not None:
        start = parse_visit_date(start_date)
        if start is None:
            raise ValueError(f"Invalid start date: {start_date!r}")

    end = None
    if end_date is not None:
        end_day = parse_visit_date(end_date)
        if end_day is None:
            raise ValueError(f"Invalid end date: {end_date!r}")
        end = end_day + ONE_DAY

    return DateWindow(start=start, end=end)


def timeframe_options() -> List[Tuple[str, str]]:
    """``(token, label)`` pairs in button order."""
    return [(token, TIMEFRAME_LABELS[token]) for token in TIMEFRAME_OFFSETS]
