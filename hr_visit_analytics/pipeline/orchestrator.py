"""
Dashboard Orchestrator - single composition point for every analytics view.

This module wires the engine's stages into one pure pass that every role's
dashboard (BHR, ZHR, VHR, CHR) calls with its own context.  There is one
parameterised flow instead of one per role; the only per-role differences
are the viewer's natural scope and the tier used for the distribution chart.

Architecture overview
---------------------
::

    DashboardContext  (immutable: viewer, selection, branches, timeframe)
         |
         v
    resolve_scope()   --> frozenset of in-scope BHR ids
         |
         v
    filter_visits()   --> submitted visits in scope / branch / window
         |
         +--> aggregate_metrics()     daily trend series
         +--> score_qualitative()     0-5 radar scores
         +--> classify_categories()   per-category rollups and counts
         +--> distribute_by_role()    visits per child org node
         +--> distribute_by_branch()  visits per branch
         +--> distribute_by_field()   performance level mix
         +--> monthly_visit_counts()  visits per month
         +--> hr_connect_stats() / coverage_stats()
         |
         v
    DashboardView     (chart-ready bundle, ``to_dict()`` for JSON)

Key properties
--------------
- Every call recomputes from scratch.  There is no cached or incremental
  state between calls, and the filter selection is never stored on the
  engine; it travels in the ``DashboardContext`` argument.
- An active selection that matches nothing produces an empty view (empty
  series, zero counts), never the unfiltered data.
- The engine holds only read-only reference data (org tree, branches).  The
  org tree is validated on construction, so a ``reports_to`` cycle fails fast
  with ``OrgCycleError``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

import pandas as pd

from ..core.config import metric_label
from ..models.data_models import (
    Actor, Branch, CategoryBreakdown, CoverageStats, DateWindow,
    DistributionEntry, HRConnectStats, QualitativeScore, Role, ScopeSelection,
    TimeSeriesPoint, VisitRecord, actors_from_frame, branches_from_frame,
)
from ..hierarchy import OrgTree, resolve_scope
from ..filtering import filter_visits, resolve_timeframe, sort_visits_by_date
from ..aggregation import (
    aggregate_metrics, score_qualitative, classify_categories,
    grouping_role_for, distribute_by_role, distribute_by_branch,
    distribute_by_field, monthly_visit_counts, summarize_metrics,
    hr_connect_stats, coverage_stats,
)

logger = logging.getLogger(__name__)


# ============================================================================
# CONTEXT
# ============================================================================

@dataclass(frozen=True)
class DashboardContext:
    """
    Everything a dashboard view is filtered by.

    Attributes:
        viewer_role: Role of the logged-in user.
        viewer_id: Id of the logged-in user (natural scope anchor).
        selection: VHR / ZHR / BHR dropdown picks.
        branch_ids: Selected branches; empty means all branches.
        timeframe: Timeframe token (``'past_month'``...), ignored when an
            explicit ``window`` is given.
        window: Explicit date window from the range picker.
        now: Reference instant for the timeframe; defaults to the current
            time when the view is built.
        metric_keys: Metrics to aggregate; None means the full catalogue.
        sort_qualitative: Order radar scores highest first.
    """
    viewer_role: Role
    viewer_id: Optional[str] = None
    selection: ScopeSelection = field(default_factory=ScopeSelection)
    branch_ids: FrozenSet[str] = frozenset()
    timeframe: Optional[str] = None
    window: Optional[DateWindow] = None
    now: Optional[Any] = None
    metric_keys: Optional[tuple] = None
    sort_qualitative: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'viewer_role', Role.parse(self.viewer_role))
        if self.selection is None:
            object.__setattr__(self, 'selection', ScopeSelection())
        object.__setattr__(self, 'branch_ids', frozenset(self.branch_ids or ()))
        if self.metric_keys is not None:
            object.__setattr__(self, 'metric_keys', tuple(self.metric_keys))

    def resolve_window(self) -> Optional[DateWindow]:
        """The date window in force: explicit window, then timeframe, else None."""
        if self.window is not None:
            return self.window
        if self.timeframe is not None:
            return resolve_timeframe(self.timeframe, self.now)
        return None

    @property
    def grouping_role(self) -> Role:
        return grouping_role_for(self.viewer_role, self.selection)


# ============================================================================
# RESULT CONTAINERS
# ============================================================================

@dataclass
class ScopeSummary:
    """Headline counts for the dashboard stat cards."""
    bhr_count: int = 0
    zhr_count: int = 0
    vhr_count: int = 0
    visit_count: int = 0
    branches_visited: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'bhr_count': self.bhr_count,
            'zhr_count': self.zhr_count,
            'vhr_count': self.vhr_count,
            'visit_count': self.visit_count,
            'branches_visited': self.branches_visited,
        }


@dataclass
class DashboardView:
    """Chart-ready output of one dashboard computation.

    Attributes:
        context: The context the view was built for.
        scope: In-scope BHR ids.
        visits: Filtered visits, newest first.
        window: Date window that was applied (None when unbounded).
        trend: Daily metric series.
        metric_snapshot: One rolled-up value per metric.
        qualitative: Radar chart scores.
        categories: Branch category rollups.
        grouping_role: Tier used for ``distribution``.
        distribution: Visits per org node one level below the scope.
        branch_distribution: Visits per branch.
        performance_distribution: Visits per performance level.
        monthly_visits: Visits per month, oldest first.
        hr_connect: HR Connect totals.
        coverage: New / star employee coverage.
        summary: Headline counts.
    """
    context: DashboardContext
    scope: FrozenSet[str]
    visits: List[VisitRecord]
    window: Optional[DateWindow]
    trend: List[TimeSeriesPoint] = field(default_factory=list)
    metric_snapshot: Dict[str, Optional[float]] = field(default_factory=dict)
    qualitative: List[QualitativeScore] = field(default_factory=list)
    categories: CategoryBreakdown = field(default_factory=CategoryBreakdown)
    grouping_role: Role = Role.BHR
    distribution: List[DistributionEntry] = field(default_factory=list)
    branch_distribution: List[DistributionEntry] = field(default_factory=list)
    performance_distribution: List[DistributionEntry] = field(default_factory=list)
    monthly_visits: List[DistributionEntry] = field(default_factory=list)
    hr_connect: HRConnectStats = field(default_factory=HRConnectStats)
    coverage: CoverageStats = field(default_factory=CoverageStats)
    summary: ScopeSummary = field(default_factory=ScopeSummary)

    @property
    def is_empty(self) -> bool:
        """True when no visit matches the current filters."""
        return not self.visits

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scope': sorted(self.scope),
            'visit_ids': [v.id for v in self.visits],
            'trend': [p.to_dict() for p in self.trend],
            'metric_snapshot': dict(self.metric_snapshot),
            'metric_labels': {key: metric_label(key) for key in self.metric_snapshot},
            'qualitative': [s.to_dict() for s in self.qualitative],
            'categories': self.categories.to_dict(),
            'grouping_role': self.grouping_role.value,
            'distribution': [e.to_dict() for e in self.distribution],
            'branch_distribution': [e.to_dict() for e in self.branch_distribution],
            'performance_distribution': [e.to_dict() for e in self.performance_distribution],
            'monthly_visits': [e.to_dict() for e in self.monthly_visits],
            'hr_connect': self.hr_connect.to_dict(),
            'coverage': self.coverage.to_dict(),
            'summary': self.summary.to_dict(),
        }


# ============================================================================
# ENGINE
# ============================================================================

class DashboardEngine:
    """
    Resolve -> filter -> aggregate, for any role.

    Usage:
        >>> engine = DashboardEngine(actors, branches)
        >>> ctx = DashboardContext(viewer_role='ZHR', viewer_id='z1',
        ...                        timeframe='past_month')
        >>> view = engine.build(visits, ctx)
        >>> view.trend[0].to_dict()
        {'date': '2024-01-02', 'manning_percentage': 90.0, ...}

    Attributes:
        tree (OrgTree): Validated organisation tree.
        branches (list[Branch]): Branch catalogue for category joins.
    """

    def __init__(self, actors: Iterable[Actor], branches: Iterable[Branch] = ()):
        self.tree = OrgTree(actors)
        self.branches = list(branches)

    @classmethod
    def from_frames(cls, users_df: pd.DataFrame,
                    branches_df: Optional[pd.DataFrame] = None) -> 'DashboardEngine':
        """Build an engine from the users / branches tables of the data store."""
        branches = branches_from_frame(branches_df) if branches_df is not None else []
        return cls(actors_from_frame(users_df), branches)

    def resolve_scope(self, context: DashboardContext) -> FrozenSet[str]:
        return resolve_scope(self.tree, context.viewer_role, context.selection,
                             viewer_id=context.viewer_id)

    def filter(self, visits: Iterable[VisitRecord],
               context: DashboardContext) -> List[VisitRecord]:
        """Scope, branch and time filtering for ``context``."""
        return filter_visits(visits, self.resolve_scope(context),
                             context.branch_ids, context.resolve_window())

    def summarize_scope(self, scope: FrozenSet[str],
                        visits: List[VisitRecord]) -> ScopeSummary:
        """Counts of in-scope actors per tier plus visit / branch totals."""
        zhrs = set()
        vhrs = set()
        for bhr_id in scope:
            zhr = self.tree.ancestor_at(bhr_id, Role.ZHR)
            if zhr is not None:
                zhrs.add(zhr.id)
            vhr = self.tree.ancestor_at(bhr_id, Role.VHR)
            if vhr is not None:
                vhrs.add(vhr.id)
        return ScopeSummary(
            bhr_count=len(scope),
            zhr_count=len(zhrs),
            vhr_count=len(vhrs),
            visit_count=len(visits),
            branches_visited=len({v.branch_id for v in visits}),
        )

    def build(self, visits: Iterable[VisitRecord],
              context: DashboardContext) -> DashboardView:
        """
        Compute every chart for ``context`` in one pass.

        Args:
            visits: Raw visits (drafts are dropped here).
            context: Viewer, selection and time filters.

        Returns:
            DashboardView.

        Raises:
            KeyError: if ``context.metric_keys`` names an unknown metric.
            ValueError: if ``context.timeframe`` is not a known token.
        """
        scope = self.resolve_scope(context)
        window = context.resolve_window()
        filtered = filter_visits(visits, scope, context.branch_ids, window)

        if not scope and not context.selection.is_empty:
            logger.info("[Dashboard] Active selection matches no BHRs; view is empty")
        elif not filtered:
            logger.info("[Dashboard] No visits match the current filters")

        metric_keys = context.metric_keys
        grouping_role = context.grouping_role

        view = DashboardView(
            context=context,
            scope=scope,
            visits=sort_visits_by_date(filtered),
            window=window,
            trend=aggregate_metrics(filtered, metric_keys),
            metric_snapshot=summarize_metrics(filtered, metric_keys),
            qualitative=score_qualitative(filtered, sort_descending=context.sort_qualitative),
            categories=classify_categories(filtered, self.branches, metric_keys),
            grouping_role=grouping_role,
            distribution=distribute_by_role(filtered, self.tree, grouping_role),
            branch_distribution=distribute_by_branch(filtered, self.branches),
            performance_distribution=distribute_by_field(filtered, 'performance_level'),
            monthly_visits=monthly_visit_counts(filtered),
            hr_connect=hr_connect_stats(filtered),
            coverage=coverage_stats(filtered),
            summary=self.summarize_scope(scope, filtered),
        )

        logger.info(
            f"[Dashboard] {context.viewer_role.value} view: {len(scope)} BHRs in scope, "
            f"{len(filtered)} visits, {len(view.trend)} trend points"
        )
        return view


def build_dashboard(actors: Iterable[Actor], branches: Iterable[Branch],
                    visits: Iterable[VisitRecord],
                    context: DashboardContext) -> DashboardView:
    """One-shot convenience wrapper around ``DashboardEngine.build``."""
    return DashboardEngine(actors, branches).build(visits, context)
