"""
HR Visit Analytics - scope resolution and metrics aggregation for branch-visit dashboards.

This package provides the read-path engine behind the BHR / ZHR / VHR / CHR
dashboards:
- Organisation tree lookups and scope resolution from filter selections
- Timeframe resolution and scope / branch / date visit filtering
- Daily metric trend series with gap-aware aggregation
- Qualitative 0-5 survey scores
- Branch category rollups in a fixed display order
- Visit distributions by org node, branch and performance level
- HR Connect and employee coverage statistics
"""

__version__ = "1.0.0"
__author__ = "HR Visit Analytics Team"

# Core imports
from .core.config import *
from .core.utils import parse_visit_date

# Models
from .models import (
    Role,
    Actor,
    Branch,
    VisitRecord,
    ScopeSelection,
    DateWindow,
    TimeSeriesPoint,
    QualitativeScore,
    CategoryBreakdown,
    DistributionEntry,
    HRConnectStats,
    CoverageStats,
    actors_from_frame,
    branches_from_frame,
    visits_from_frame,
)

# Hierarchy
from .hierarchy import (
    OrgTree,
    OrgCycleError,
    resolve_scope,
    natural_scope,
    selectable_children,
)

# Filtering
from .filtering import (
    resolve_timeframe,
    explicit_window,
    timeframe_options,
    filter_visits,
    sort_visits_by_date,
)

# Aggregation
from .aggregation import (
    NO_DATA,
    aggregate_metrics,
    summarize_metrics,
    monthly_visit_counts,
    score_qualitative,
    classify_categories,
    order_categories,
    grouping_role_for,
    distribute_by_role,
    distribute_by_branch,
    distribute_by_field,
    hr_connect_stats,
    coverage_stats,
)

# Pipeline
from .pipeline import DashboardContext, DashboardView, DashboardEngine, build_dashboard

__all__ = [
    # Core
    'parse_visit_date',

    # Models
    'Role',
    'Actor',
    'Branch',
    'VisitRecord',
    'ScopeSelection',
    'DateWindow',
    'TimeSeriesPoint',
    'QualitativeScore',
    'CategoryBreakdown',
    'DistributionEntry',
    'HRConnectStats',
    'CoverageStats',
    'actors_from_frame',
    'branches_from_frame',
    'visits_from_frame',

    # Hierarchy
    'OrgTree',
    'OrgCycleError',
    'resolve_scope',
    'natural_scope',
    'selectable_children',

    # Filtering
    'resolve_timeframe',
    'explicit_window',
    'timeframe_options',
    'filter_visits',
    'sort_visits_by_date',

    # Aggregation
    'NO_DATA',
    'aggregate_metrics',
    'summarize_metrics',
    'monthly_visit_counts',
    'score_qualitative',
    'classify_categories',
    'order_categories',
    'grouping_role_for',
    'distribute_by_role',
    'distribute_by_branch',
    'distribute_by_field',
    'hr_connect_stats',
    'coverage_stats',

    # Pipeline
    'DashboardContext',
    'DashboardView',
    'DashboardEngine',
    'build_dashboard',

    # Metadata
    '__version__',
]
