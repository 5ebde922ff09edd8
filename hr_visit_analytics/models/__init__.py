"""
Models module for HR Visit Analytics.

Contains the input entities, filter parameters and chart-ready result types.
"""

from .data_models import (
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
    validate_dataframe,
    normalize_status,
    actors_from_frame,
    branches_from_frame,
    visits_from_frame,
    visits_to_frame,
)

__all__ = [
    # Entities
    'Role',
    'Actor',
    'Branch',
    'VisitRecord',
    # Filter parameters
    'ScopeSelection',
    'DateWindow',
    # Results
    'TimeSeriesPoint',
    'QualitativeScore',
    'CategoryBreakdown',
    'DistributionEntry',
    'HRConnectStats',
    'CoverageStats',
    # Ingestion
    'validate_dataframe',
    'normalize_status',
    'actors_from_frame',
    'branches_from_frame',
    'visits_from_frame',
    'visits_to_frame',
]
