"""
Pipeline module for HR Visit Analytics.

Contains the dashboard composition: resolve scope, filter visits, aggregate.
"""

from .orchestrator import (
    DashboardContext,
    DashboardView,
    DashboardEngine,
    ScopeSummary,
    build_dashboard,
)

__all__ = [
    'DashboardContext',
    'DashboardView',
    'DashboardEngine',
    'ScopeSummary',
    'build_dashboard',
]
