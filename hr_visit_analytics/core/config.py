"""
Central Configuration Module for HR Visit Analytics.

=== PURPOSE ===
This module is the single source of truth for every constant used by the
scoping and aggregation engine: the organisational tiers, the numeric metric
catalogue (and whether each metric is summed or averaged), the qualitative
survey questions and their polarity, the timeframe tokens offered by the
dashboards, and the branch-category display order.  Every other module
imports from here rather than defining its own magic values.

=== DATA FLOW ===
  1. ROLE_TIERS drives the hierarchy package: scope resolution walks the
     tiers top-down, the entity distributor walks them bottom-up.
  2. METRIC_CONFIGS drives aggregation.metrics and aggregation.categories:
     the ``aggregation`` field decides between a mean (percentage metrics)
     and a plain sum (case counts).
  3. QUALITATIVE_QUESTIONS drives aggregation.qualitative.  ``positive_is_yes``
     tells the scorer which answer is the healthy one.
  4. TIMEFRAME_OFFSETS drives filtering.timeframe.
  5. CATEGORY_DISPLAY_ORDER / UNCATEGORIZED_LABEL drive category ordering.
  6. COL_* constants name the data-store columns read by the DataFrame
     ingestion helpers in models.data_models.

=== KEY DESIGN DECISIONS ===
- A metric key that is not listed in METRIC_CONFIGS is a programmer error.
  Lookups go through ``get_metric_config`` which raises ``KeyError`` so the
  mistake surfaces in tests instead of silently producing zeros.
- MAX_TIER_DEPTH bounds every ancestor walk; a longer chain can only mean a
  cycle in ``reports_to``.
"""

# ==========================================
# ORGANISATION TIERS
# ==========================================
# Ascending order of organisational scope.  A non-root actor always reports
# to an actor exactly one tier above its own.
ROLE_BHR = "BHR"   # Branch HR -- files visit reports
ROLE_ZHR = "ZHR"   # Zonal HR
ROLE_VHR = "VHR"   # Vertical HR
ROLE_CHR = "CHR"   # Chief HR -- sees the whole organisation

ROLE_TIERS = [ROLE_BHR, ROLE_ZHR, ROLE_VHR, ROLE_CHR]

# Longest possible BHR -> ZHR -> VHR -> CHR chain.  Ancestor walks that take
# more steps than this have hit a cycle.
MAX_TIER_DEPTH = len(ROLE_TIERS)

# ==========================================
# VISIT STATUS
# ==========================================
STATUS_DRAFT = "draft"
STATUS_SUBMITTED = "submitted"

# ==========================================
# NUMERIC METRICS
# ==========================================
# 'average' metrics are percentages: a day/category rollup is the mean of the
# contributing values.  'sum' metrics are event counts: the rollup is the sum.
AGG_AVERAGE = "average"
AGG_SUM = "sum"

METRIC_CONFIGS = {
    'manning_percentage': {
        'label': 'Manning %',
        'aggregation': AGG_AVERAGE,
    },
    'attrition_percentage': {
        'label': 'Attrition %',
        'aggregation': AGG_AVERAGE,
    },
    'non_vendor_percentage': {
        'label': 'Non-Vendor %',
        'aggregation': AGG_AVERAGE,
    },
    'er_percentage': {
        'label': 'ER %',
        'aggregation': AGG_AVERAGE,
    },
    'cwt_cases': {
        'label': 'CWT Cases',
        'aggregation': AGG_SUM,
    },
}

METRIC_KEYS = list(METRIC_CONFIGS.keys())

# All averages and scores are reported with two decimals.
ROUND_DIGITS = 2

def get_metric_config(metric_key):
    """Return the configuration dict for ``metric_key``.

    Raises:
        KeyError: if the metric is not part of the catalogue.
    """
    try:
        return METRIC_CONFIGS[metric_key]
    except KeyError:
        raise KeyError(
            f"Unknown metric '{metric_key}'. Supported metrics: {METRIC_KEYS}"
        ) from None

def is_sum_metric(metric_key):
    """True for count-type metrics whose rollup is a plain sum."""
    return get_metric_config(metric_key)['aggregation'] == AGG_SUM


def metric_label(metric_key):
    """Display label for chart legends and stat cards."""
    return get_metric_config(metric_key)['label']

# ==========================================
# QUALITATIVE ASSESSMENT
# ==========================================
# Yes/No survey questions answered on each visit.  ``positive_is_yes`` is
# False for questions where "yes" is the bad answer (abusive language).
QUALITATIVE_QUESTIONS = [
    {'key': 'qual_aligned_conduct', 'label': 'Leaders Aligned with Code', 'positive_is_yes': True},
    {'key': 'qual_safe_secure', 'label': 'Employees Feel Safe', 'positive_is_yes': True},
    {'key': 'qual_motivated', 'label': 'Employees Feel Motivated', 'positive_is_yes': True},
    {'key': 'qual_abusive_language', 'label': 'Leaders Use Abusive Language', 'positive_is_yes': False},
    {'key': 'qual_comfortable_escalate', 'label': 'Comfortable with Escalation', 'positive_is_yes': True},
    {'key': 'qual_inclusive_culture', 'label': 'Inclusive Culture', 'positive_is_yes': True},
]

QUALITATIVE_KEYS = [q['key'] for q in QUALITATIVE_QUESTIONS]

QUALITATIVE_MAX_SCORE = 5.0
ANSWER_YES = "yes"
ANSWER_NO = "no"

# ==========================================
# TIMEFRAMES
# ==========================================
# Offsets are applied with pandas.DateOffset so "one month ago" follows the
# calendar (Mar 31 -> Feb 28/29) rather than a fixed number of days.
TIMEFRAME_OFFSETS = {
    'past_week': {'days': 7},
    'past_month': {'months': 1},
    'last_3_months': {'months': 3},
    'last_6_months': {'months': 6},
    'last_year': {'years': 1},
    'last_3_years': {'years': 3},
}

TIMEFRAME_LABELS = {
    'past_week': 'Past Week',
    'past_month': 'Past Month',
    'last_3_months': 'Last 3 Months',
    'last_6_months': 'Last 6 Months',
    'last_year': 'Last Year',
    'last_3_years': 'Last 3 Years',
}

# ==========================================
# BRANCH CATEGORIES
# ==========================================
# Preferred display order.  Anything else is listed alphabetically after
# these, and UNCATEGORIZED_LABEL always comes last.
CATEGORY_DISPLAY_ORDER = ['Gold', 'Silver', 'Bronze', 'Platinum', 'Diamond']
UNCATEGORIZED_LABEL = "uncategorized"

# ==========================================
# FORMATTING
# ==========================================
DATE_FORMAT = "%Y-%m-%d"
MONTH_LABEL_FORMAT = "%b %Y"   # e.g. "Jan 2024"

# ==========================================
# COLUMN MAPPINGS (data store -> engine)
# ==========================================
COL_USER_ID = 'id'
COL_USER_NAME = 'name'
COL_USER_ROLE = 'role'
COL_REPORTS_TO = 'reports_to'

COL_BRANCH_ID = 'id'
COL_BRANCH_NAME = 'name'
COL_BRANCH_CATEGORY = 'category'

COL_VISIT_ID = 'id'
COL_VISIT_BHR = 'bhr_id'
COL_VISIT_BRANCH = 'branch_id'
COL_VISIT_DATE = 'visit_date'
COL_VISIT_STATUS = 'status'
COL_PERFORMANCE_LEVEL = 'performance_level'
COL_HR_CONNECT_CONDUCTED = 'hr_connect_conducted'
COL_HR_CONNECT_INVITED = 'hr_connect_employees_invited'
COL_HR_CONNECT_PARTICIPANTS = 'hr_connect_participants'
COL_NEW_EMPLOYEES_TOTAL = 'new_employees_total'
COL_NEW_EMPLOYEES_COVERED = 'new_employees_covered'
COL_STAR_EMPLOYEES_TOTAL = 'star_employees_total'
COL_STAR_EMPLOYEES_COVERED = 'star_employees_covered'

REQUIRED_USER_COLUMNS = [COL_USER_ID, COL_USER_ROLE]
REQUIRED_BRANCH_COLUMNS = [COL_BRANCH_ID]
REQUIRED_VISIT_COLUMNS = [COL_VISIT_BHR, COL_VISIT_BRANCH, COL_VISIT_DATE]
