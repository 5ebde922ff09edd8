"""
Data models and validation for visit analytics.

This module defines the **schema layer** for the HR Visit Analytics engine.
It provides typed dataclasses that describe the shape of every entity flowing
through the engine, plus helpers that build those entities from the tabular
rows handed over by the data store.

Role in the engine
------------------
The engine is a pure read/transform layer.  These dataclasses serve three
purposes:

1. **Reference data** -- ``Actor`` and ``Branch`` describe the organisation
   tree and the branch catalogue.  They are never mutated by the engine.

2. **Visit records** -- ``VisitRecord`` carries one filed branch-visit report
   with its numeric metrics and yes/no survey answers.  Accessors such as
   ``metric()`` and ``answer()`` already apply the tolerance rules (non-numeric
   values and unknown answers read as absent), so aggregators never need to
   defend against malformed cells themselves.

3. **Chart-ready results** -- ``TimeSeriesPoint``, ``QualitativeScore``,
   ``CategoryBreakdown``, ``DistributionEntry``, ``HRConnectStats`` and
   ``CoverageStats`` are what the presentation layer consumes.  Each has a
   ``to_dict()`` for JSON serialisation.

Dataclass hierarchy
-------------------
::

    Actor, Branch, VisitRecord        (inputs)
    ScopeSelection, DateWindow         (filter parameters)
    TimeSeriesPoint                    (metrics aggregator output)
    QualitativeScore                   (qualitative scorer output)
    CategoryBreakdown                  (category classifier output)
    DistributionEntry                  (entity distributor output)
    HRConnectStats, CoverageStats      (engagement statistics)

Normalisation conventions
-------------------------
- **Role** strings are case-insensitive (``"zhr"`` -> ``Role.ZHR``).  An
  unknown role is a configuration error and raises ``ValueError``.
- **Status** is lower-cased.  A row without a status is treated as already
  submitted, because the data store usually filters on status before the rows
  reach the engine.
"""

import logging
import pandas as pd
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any, FrozenSet

from ..core.config import (
    ROLE_TIERS, ROLE_BHR, ROLE_ZHR, ROLE_VHR, ROLE_CHR,
    STATUS_SUBMITTED, METRIC_KEYS, QUALITATIVE_KEYS, QUALITATIVE_MAX_SCORE,
    DATE_FORMAT,
    COL_USER_ID, COL_USER_NAME, COL_USER_ROLE, COL_REPORTS_TO,
    COL_BRANCH_ID, COL_BRANCH_NAME, COL_BRANCH_CATEGORY,
    COL_VISIT_ID, COL_VISIT_BHR, COL_VISIT_BRANCH, COL_VISIT_DATE,
    COL_VISIT_STATUS, COL_PERFORMANCE_LEVEL, COL_HR_CONNECT_CONDUCTED,
    COL_HR_CONNECT_INVITED, COL_HR_CONNECT_PARTICIPANTS,
    COL_NEW_EMPLOYEES_TOTAL, COL_NEW_EMPLOYEES_COVERED,
    COL_STAR_EMPLOYEES_TOTAL, COL_STAR_EMPLOYEES_COVERED,
    REQUIRED_USER_COLUMNS, REQUIRED_BRANCH_COLUMNS, REQUIRED_VISIT_COLUMNS,
)
from ..core.utils import (
    parse_visit_date, to_number, to_count, normalize_answer, clean_label,
    to_id,
)

logger = logging.getLogger(__name__)


# ============================================================================
# ORGANISATION MODEL
# ============================================================================

class Role(Enum):
    """
    Organisational tiers, in ascending order of scope.

    Values:
        BHR: Branch HR, the only tier that files visits.
        ZHR: Zonal HR, supervises BHRs.
        VHR: Vertical HR, supervises ZHRs.
        CHR: Chief HR, sees the whole organisation.
    """
    BHR = ROLE_BHR
    ZHR = ROLE_ZHR
    VHR = ROLE_VHR
    CHR = ROLE_CHR

    @property
    def tier(self) -> int:
        """Zero-based tier index (BHR=0 ... CHR=3)."""
        return ROLE_TIERS.index(self.value)

    @property
    def parent(self) -> Optional['Role']:
        """The tier this role reports to, or None for CHR."""
        if self.tier + 1 >= len(ROLE_TIERS):
            return None
        return Role(ROLE_TIERS[self.tier + 1])

    @property
    def child(self) -> Optional['Role']:
        """The tier that reports to this role, or None for BHR."""
        if self.tier == 0:
            return None
        return Role(ROLE_TIERS[self.tier - 1])

    @classmethod
    def parse(cls, value) -> 'Role':
        """Build a Role from a role string (case-insensitive) or a Role."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        try:
            return cls(text)
        except ValueError:
            raise ValueError(
                f"Unknown role '{value}'. Expected one of {ROLE_TIERS}"
            ) from None


@dataclass
class Actor:
    """An organisation member (a node of the org tree).

    Attributes:
        id: Unique user identifier.
        role: Organisational tier.
        reports_to: Id of the manager one tier above, or None for a root.
        name: Display name used for distribution labels.
    """
    id: str
    role: Role
    reports_to: Optional[str] = None
    name: str = ""

    def __post_init__(self):
        self.role = Role.parse(self.role)

    @property
    def label(self) -> str:
        return self.name or self.id


@dataclass
class Branch:
    """A branch that BHRs visit.

    ``category`` is free-form (Gold, Silver, ...) and may be missing.
    """
    id: str
    category: Optional[str] = None
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or self.id


# ============================================================================
# VISIT RECORD
# ============================================================================

@dataclass
class VisitRecord:
    """A single branch-visit report filed by a BHR.

    ``visit_date`` is kept as received (ISO string, ``date`` or Timestamp);
    ``parsed_date`` gives the normalised day or None when it is unparseable.

    Attributes:
        id: Visit identifier.
        author_id: Id of the BHR who filed the visit.
        branch_id: Id of the visited branch.
        visit_date: Raw visit date.
        status: ``'draft'`` or ``'submitted'``.
        numeric_metrics: metric key -> number (absent keys mean no value).
        qualitative_answers: question key -> ``'yes'`` / ``'no'``.
        performance_level: Free-text branch performance rating.
        hr_connect_conducted: Whether an HR Connect session was held.
        hr_connect_invited: Employees invited to the HR Connect session.
        hr_connect_participants: Employees who attended it.
        new_employees_total: New joiners at the branch.
        new_employees_covered: New joiners met during the visit.
        star_employees_total: Star performers at the branch.
        star_employees_covered: Star performers met during the visit.
    """
    id: str
    author_id: str
    branch_id: str
    visit_date: Any
    status: str = STATUS_SUBMITTED
    numeric_metrics: Dict[str, Any] = field(default_factory=dict)
    qualitative_answers: Dict[str, Any] = field(default_factory=dict)

    # ---- Supplementary visit details ----
    performance_level: Optional[str] = None
    hr_connect_conducted: bool = False
    hr_connect_invited: Optional[int] = None
    hr_connect_participants: Optional[int] = None
    new_employees_total: Optional[int] = None
    new_employees_covered: Optional[int] = None
    star_employees_total: Optional[int] = None
    star_employees_covered: Optional[int] = None

    def __post_init__(self):
        self.status = normalize_status(self.status)

    @property
    def is_submitted(self) -> bool:
        return self.status == STATUS_SUBMITTED

    @property
    def parsed_date(self) -> Optional[pd.Timestamp]:
        """Visit day as a midnight Timestamp, or None if unparseable."""
        return parse_visit_date(self.visit_date)

    def metric(self, key: str) -> Optional[float]:
        """Numeric value of ``key``; None when absent, NaN or non-numeric."""
        return to_number(self.numeric_metrics.get(key))

    def answer(self, key: str) -> Optional[str]:
        """Survey answer for ``key``: ``'yes'``, ``'no'`` or None."""
        return normalize_answer(self.qualitative_answers.get(key))


# ============================================================================
# FILTER PARAMETERS
# ============================================================================

@dataclass(frozen=True)
class ScopeSelection:
    """Ids picked in the VHR / ZHR / BHR filter dropdowns.

    An empty tuple means "no filter at this level".  The most specific
    non-empty level wins during scope resolution.
    """
    vhr_ids: FrozenSet[str] = frozenset()
    zhr_ids: FrozenSet[str] = frozenset()
    bhr_ids: FrozenSet[str] = frozenset()

    def __post_init__(self):
        # Accept any iterable but store frozensets so the selection is hashable
        for name in ('vhr_ids', 'zhr_ids', 'bhr_ids'):
            value = getattr(self, name)
            if isinstance(value, str):
                value = [value]
            object.__setattr__(self, name, frozenset(value or ()))

    @property
    def is_empty(self) -> bool:
        return not (self.vhr_ids or self.zhr_ids or self.bhr_ids)

    @property
    def deepest_role(self) -> Optional[Role]:
        """The most specific level with an active selection."""
        if self.bhr_ids:
            return Role.BHR
        if self.zhr_ids:
            return Role.ZHR
        if self.vhr_ids:
            return Role.VHR
        return None


@dataclass(frozen=True)
class DateWindow:
    """Half-open date interval ``[start, end)``.

    Both bounds are midnight Timestamps.  ``end=None`` means open-ended.
    A window whose start is after its end is empty and matches nothing.
    """
    start: Optional[pd.Timestamp] = None
    end: Optional[pd.Timestamp] = None

    @property
    def is_empty(self) -> bool:
        return self.start is not None and self.end is not None and self.start > self.end

    def contains(self, day: Optional[pd.Timestamp]) -> bool:
        if day is None or self.is_empty:
            return False
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day >= self.end:
            return False
        return True


# ============================================================================
# CHART-READY RESULTS
# ============================================================================

@dataclass
class TimeSeriesPoint:
    """One day of a metric trend line.

    ``values`` maps metric key -> rounded number, or None (the no-data
    marker) when no visit contributed a value for that metric on that day.
    """
    date: pd.Timestamp
    values: Dict[str, Optional[float]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        row = {'date': self.date.strftime(DATE_FORMAT)}
        row.update(self.values)
        return row


@dataclass
class QualitativeScore:
    """Average 0-5 score for one yes/no survey question."""
    key: str
    subject: str
    score: float
    responses: int = 0
    full_mark: float = QUALITATIVE_MAX_SCORE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'subject': self.subject,
            'score': self.score,
            'fullMark': self.full_mark,
            'key': self.key,
            'responses': self.responses,
        }


@dataclass
class CategoryBreakdown:
    """Per-branch-category rollup over a filtered visit set.

    Attributes:
        categories: Category names in display order.
        metrics: category -> {metric key -> rolled-up value or None}.
        visit_counts: category -> number of visits.
    """
    categories: List[str] = field(default_factory=list)
    metrics: Dict[str, Dict[str, Optional[float]]] = field(default_factory=dict)
    visit_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def total_visits(self) -> int:
        return sum(self.visit_counts.values())

    def to_records(self) -> List[Dict[str, Any]]:
        """One row per category, in display order (bar chart input)."""
        rows = []
        for category in self.categories:
            row = {'category': category, 'visits': self.visit_counts.get(category, 0)}
            row.update(self.metrics.get(category, {}))
            rows.append(row)
        return rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            'categories': list(self.categories),
            'metrics': {c: dict(m) for c, m in self.metrics.items()},
            'visit_counts': dict(self.visit_counts),
        }


@dataclass
class DistributionEntry:
    """One slice of a pie/bar distribution."""
    label: str
    count: int
    key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.label, 'value': self.count, 'key': self.key}


@dataclass
class HRConnectStats:
    """HR Connect session totals across a visit set."""
    sessions_conducted: int = 0
    total_invited: int = 0
    total_participants: int = 0
    participation_rate: int = 0  # whole percent

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalConducted': self.sessions_conducted,
            'totalInvited': self.total_invited,
            'totalParticipants': self.total_participants,
            'averageParticipationRate': self.participation_rate,
        }


@dataclass
class CoverageStats:
    """How many new joiners / star performers the visits reached."""
    new_employees_total: int = 0
    new_employees_covered: int = 0
    star_employees_total: int = 0
    star_employees_covered: int = 0
    new_coverage_pct: Optional[float] = None
    star_coverage_pct: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'new_employees_total': self.new_employees_total,
            'new_employees_covered': self.new_employees_covered,
            'new_coverage_pct': self.new_coverage_pct,
            'star_employees_total': self.star_employees_total,
            'star_employees_covered': self.star_employees_covered,
            'star_coverage_pct': self.star_coverage_pct,
        }


# ============================================================================
# DATAFRAME VALIDATION UTILITY
# ============================================================================

def validate_dataframe(df: pd.DataFrame, required_columns: List[str]) -> tuple:
    """
    Validate that a DataFrame has the required columns.

    Returns:
        Tuple of ``(is_valid: bool, missing_columns: List[str])``.
    """
    missing = [col for col in required_columns if col not in df.columns]
    return (len(missing) == 0, missing)


def _require_columns(df: pd.DataFrame, required_columns: List[str], what: str):
    is_valid, missing = validate_dataframe(df, required_columns)
    if not is_valid:
        raise ValueError(f"{what} data is missing required columns: {missing}")


# ============================================================================
# DATA NORMALISATION FUNCTIONS
# ============================================================================

def normalize_status(status) -> str:
    """Normalise a visit status.

    Missing statuses count as submitted; anything else is lower-cased so that
    ``"Submitted"`` and ``"submitted"`` compare equal.
    """
    label = clean_label(status)
    if label is None:
        return STATUS_SUBMITTED
    return label.lower()


def _cell(row: Dict[str, Any], column: str):
    value = row.get(column)
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # list-like cells; pass them through untouched
        pass
    return value


def _flag(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1', 't', 'y')
    return bool(value)


# ============================================================================
# DATAFRAME INGESTION
# ============================================================================

def actors_from_frame(df: pd.DataFrame) -> List[Actor]:
    """Build ``Actor`` objects from a users table.

    Expects ``id`` and ``role`` columns; ``reports_to`` and ``name`` are
    optional.

    Raises:
        ValueError: on missing required columns or an unknown role.
    """
    _require_columns(df, REQUIRED_USER_COLUMNS, "User")
    actors = []
    for row in df.to_dict('records'):
        actors.append(Actor(
            id=to_id(row[COL_USER_ID]),
            role=Role.parse(row[COL_USER_ROLE]),
            reports_to=to_id(_cell(row, COL_REPORTS_TO)),
            name=clean_label(_cell(row, COL_USER_NAME)) or "",
        ))
    logger.debug(f"Loaded {len(actors)} actors")
    return actors


def branches_from_frame(df: pd.DataFrame) -> List[Branch]:
    """Build ``Branch`` objects from a branches table (``id`` required)."""
    _require_columns(df, REQUIRED_BRANCH_COLUMNS, "Branch")
    branches = [
        Branch(
            id=to_id(row[COL_BRANCH_ID]),
            category=clean_label(_cell(row, COL_BRANCH_CATEGORY)),
            name=clean_label(_cell(row, COL_BRANCH_NAME)) or "",
        )
        for row in df.to_dict('records')
    ]
    logger.debug(f"Loaded {len(branches)} branches")
    return branches


def visits_from_frame(df: pd.DataFrame) -> List[VisitRecord]:
    """Build ``VisitRecord`` objects from a visits table.

    ``bhr_id``, ``branch_id`` and ``visit_date`` are required.  Metric and
    survey columns are picked up by name when present; a missing ``id``
    column falls back to the row index.  Cell values are passed through
    unchanged so that the tolerance rules of ``VisitRecord`` apply.
    """
    _require_columns(df, REQUIRED_VISIT_COLUMNS, "Visit")
    metric_cols = [c for c in METRIC_KEYS if c in df.columns]
    qual_cols = [c for c in QUALITATIVE_KEYS if c in df.columns]

    visits = []
    for index, row in zip(df.index, df.to_dict('records')):
        visit_id = to_id(_cell(row, COL_VISIT_ID))
        visits.append(VisitRecord(
            id=visit_id or str(index),
            author_id=to_id(row[COL_VISIT_BHR]),
            branch_id=to_id(row[COL_VISIT_BRANCH]),
            visit_date=_cell(row, COL_VISIT_DATE),
            status=normalize_status(_cell(row, COL_VISIT_STATUS)),
            numeric_metrics={c: _cell(row, c) for c in metric_cols if _cell(row, c) is not None},
            qualitative_answers={c: _cell(row, c) for c in qual_cols if _cell(row, c) is not None},
            performance_level=clean_label(_cell(row, COL_PERFORMANCE_LEVEL)),
            hr_connect_conducted=_flag(_cell(row, COL_HR_CONNECT_CONDUCTED)),
            hr_connect_invited=to_count(_cell(row, COL_HR_CONNECT_INVITED)),
            hr_connect_participants=to_count(_cell(row, COL_HR_CONNECT_PARTICIPANTS)),
            new_employees_total=to_count(_cell(row, COL_NEW_EMPLOYEES_TOTAL)),
            new_employees_covered=to_count(_cell(row, COL_NEW_EMPLOYEES_COVERED)),
            star_employees_total=to_count(_cell(row, COL_STAR_EMPLOYEES_TOTAL)),
            star_employees_covered=to_count(_cell(row, COL_STAR_EMPLOYEES_COVERED)),
        ))
    logger.debug(f"Loaded {len(visits)} visits")
    return visits


def visits_to_frame(visits: List[VisitRecord]) -> pd.DataFrame:
    """Flatten visits into one row per visit with a parsed ``day`` column.

    Metric columns hold floats (NaN for absent values) so that pandas
    group-bys skip them naturally.  Visits with an unparseable date keep a
    NaT ``day``.
    """
    rows = []
    for visit in visits:
        row = {
            'visit_id': visit.id,
            'author_id': visit.author_id,
            'branch_id': visit.branch_id,
            'day': visit.parsed_date,
        }
        for key in METRIC_KEYS:
            row[key] = visit.metric(key)
        for key in QUALITATIVE_KEYS:
            row[key] = visit.answer(key)
        rows.append(row)
    columns = ['visit_id', 'author_id', 'branch_id', 'day'] + METRIC_KEYS + QUALITATIVE_KEYS
    df = pd.DataFrame(rows, columns=columns)
    df['day'] = pd.to_datetime(df['day'])
    for key in METRIC_KEYS:
        df[key] = pd.to_numeric(df[key], errors='coerce').astype(float)
    return df
