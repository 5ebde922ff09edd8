"""
Aggregation modules for HR Visit Analytics.

Includes:
- Daily metric trend series and snapshots
- Qualitative 0-5 survey scores
- Branch category rollups
- Visit distributions by org node, branch and attribute
- HR Connect and employee coverage statistics
"""

from .metrics import (
    NO_DATA,
    aggregate_metrics,
    series_to_records,
    summarize_metrics,
    monthly_visit_counts,
)

from .qualitative import score_qualitative

from .categories import classify_categories, order_categories

from .distribution import (
    grouping_role_for,
    distribute_by_role,
    distribute_by_branch,
    distribute_by_field,
)

from .engagement import hr_connect_stats, coverage_stats

__all__ = [
    # Metrics
    'NO_DATA',
    'aggregate_metrics',
    'series_to_records',
    'summarize_metrics',
    'monthly_visit_counts',
    # Qualitative
    'score_qualitative',
    # Categories
    'classify_categories',
    'order_categories',
    # Distribution
    'grouping_role_for',
    'distribute_by_role',
    'distribute_by_branch',
    'distribute_by_field',
    # Engagement
    'hr_connect_stats',
    'coverage_stats',
]
