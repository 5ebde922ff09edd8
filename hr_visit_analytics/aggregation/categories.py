"""
Branch Category Classification.

Joins each visit to its branch's category (Gold, Silver, ...) and computes,
per category, one rolled-up value per metric plus a visit count.  The result
is a single snapshot over the whole filtered set, not a time series.

Display order:
    1. Gold, Silver, Bronze, Platinum, Diamond (``CATEGORY_DISPLAY_ORDER``)
    2. any other category, alphabetically
    3. ``"uncategorized"`` always last

Visits whose branch is unknown, or whose branch has no category, are counted
under ``"uncategorized"``.  Metric rollups follow the same sum/mean rule as
the daily series, with ``NO_DATA`` for a category where no visit carries the
metric.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..core.config import CATEGORY_DISPLAY_ORDER, UNCATEGORIZED_LABEL
from ..models.data_models import Branch, CategoryBreakdown, VisitRecord, visits_to_frame
from .metrics import resolve_metric_keys, rollup

logger = logging.getLogger(__name__)


def _order_key(category: str):
    if category == UNCATEGORIZED_LABEL:
        return (2, 0, "")
    if category in CATEGORY_DISPLAY_ORDER:
        return (0, CATEGORY_DISPLAY_ORDER.index(category), "")
    return (1, 0, category)


def order_categories(categories: Iterable[Optional[str]]) -> List[str]:
    """
    Sort category names into display order.

    Missing names become ``"uncategorized"``; duplicates are collapsed.

    Example:
        >>> order_categories(['Bronze', 'Zeta', 'Gold', None])
        ['Gold', 'Bronze', 'Zeta', 'uncategorized']
    """
    names = {c if c else UNCATEGORIZED_LABEL for c in categories}
    return sorted(names, key=_order_key)


def category_lookup(branches: Iterable[Branch]) -> Dict[str, str]:
    """branch id -> category label (``"uncategorized"`` when missing)."""
    return {b.id: (b.category or UNCATEGORIZED_LABEL) for b in branches}


def classify_categories(visits: Iterable[VisitRecord], branches: Iterable[Branch],
                        metric_keys: Optional[Iterable[str]] = None) -> CategoryBreakdown:
    """
    Roll visits up by branch category.

    Args:
        visits: Filtered visits.
        branches: Branch catalogue used for the category join.
        metric_keys: Metrics to roll up; defaults to the whole catalogue.

    Returns:
        CategoryBreakdown with categories in display order.  Only categories
        that have at least one visit are listed.

    Raises:
        KeyError: if a metric key is not in the catalogue.
    """
    keys = resolve_metric_keys(metric_keys)
    visits = list(visits)
    if not visits:
        return CategoryBreakdown()

    lookup = category_lookup(branches)
    unknown = {v.branch_id for v in visits if v.branch_id not in lookup}
    if unknown:
        logger.warning(f"No branch found for ids {sorted(unknown)}; counting them as {UNCATEGORIZED_LABEL}")

    df = visits_to_frame(visits)
    df['category'] = df['branch_id'].map(lambda b: lookup.get(b, UNCATEGORIZED_LABEL))

    categories = order_categories(df['category'].unique())
    counts = df['category'].value_counts()

    metrics = {}
    for category, group in df.groupby('category'):
        metrics[category] = {key: rollup(group[key], key) for key in keys}

    return CategoryBreakdown(
        categories=categories,
        metrics={c: metrics[c] for c in categories},
        visit_counts={c: int(counts[c]) for c in categories},
    )
