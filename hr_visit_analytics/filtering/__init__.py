"""
Filtering modules for HR Visit Analytics.

Includes:
- Timeframe token and date-range resolution
- The scope / branch / date visit filter
"""

from .timeframe import resolve_timeframe, explicit_window, timeframe_options
from .visit_filter import filter_visits, sort_visits_by_date

__all__ = [
    'resolve_timeframe',
    'explicit_window',
    'timeframe_options',
    'filter_visits',
    'sort_visits_by_date',
]
