"""
Core module for HR Visit Analytics.

Contains configuration constants and base utilities.
"""

from hr_visit_analytics.core.config import *
from hr_visit_analytics.core.utils import (
    parse_visit_date,
    to_number,
    to_count,
    round_value,
    normalize_answer,
    clean_label,
    to_id,
)

__all__ = [
    # Utils
    'parse_visit_date',
    'to_number',
    'to_count',
    'round_value',
    'normalize_answer',
    'clean_label',
    'to_id',
]
