"""
Metrics Aggregation.

Folds filtered visits into day-bucketed trend series for the numeric branch
metrics (Manning %, Attrition %, Non-Vendor %, ER %, CWT Cases).

Aggregation rules:
    Each metric is either *average-type* (percentages) or *sum-type* (event
    counts), as declared in ``config.METRIC_CONFIGS``:

    - average-type: arithmetic mean of the values present that day, rounded
      to two decimals.
    - sum-type: plain sum of the values present that day.

    A visit whose value is missing, NaN or non-numeric contributes nothing
    for that metric; the rest of the visit still counts.

Gap vs. zero:
    A day without any contributing value gets ``NO_DATA`` (None), not 0.
    Trend charts draw None as a gap and 0 as a real low point, so the two
    must never be conflated.

Date extent:
    The series runs from the earliest to the latest visit day present in the
    input, one point per calendar day, including days without visits.  It is
    deliberately clipped to the data, not to the requested timeframe.  An
    empty input gives an empty series so the chart can render its empty
    state.

Implementation:
    Visits are flattened with ``visits_to_frame`` and grouped by day with
    pandas; ``sum(min_count=1)`` and ``mean()`` both yield NaN for buckets
    with no values, and ``reindex`` over ``pd.date_range`` fills the missing
    days with NaN.  NaN is converted to ``NO_DATA`` on the way out.
"""

import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..core.config import METRIC_KEYS, MONTH_LABEL_FORMAT, is_sum_metric
from ..core.utils import round_value
from ..models.data_models import (
    VisitRecord, TimeSeriesPoint, DistributionEntry, visits_to_frame,
)

logger = logging.getLogger(__name__)

# Marker for "no contributing value" in series and rollups.
NO_DATA = None


def resolve_metric_keys(metric_keys: Optional[Iterable[str]]) -> List[str]:
    """Default to the full catalogue and reject unknown keys."""
    keys = list(METRIC_KEYS if metric_keys is None else metric_keys)
    for key in keys:
        is_sum_metric(key)
    return keys


def rollup(values: pd.Series, metric_key: str) -> Optional[float]:
    """
    Reduce one metric's values to a single number.

    Args:
        values: Float series; NaN entries are absent values.
        metric_key: Catalogue key deciding sum vs. mean.

    Returns:
        Rounded mean or sum, or ``NO_DATA`` when no value is present.
    """
    present = values.dropna()
    if present.empty:
        return NO_DATA
    if is_sum_metric(metric_key):
        return float(present.sum())
    return round_value(present.mean())


def _bucket(grouped, metric_key: str) -> pd.Series:
    if is_sum_metric(metric_key):
        return grouped[metric_key].sum(min_count=1)
    return grouped[metric_key].mean().map(round_value)


def aggregate_metrics(visits: Iterable[VisitRecord],
                      metric_keys: Optional[Iterable[str]] = None) -> List[TimeSeriesPoint]:
    """
    Build the daily trend series.

    Args:
        visits: Filtered visits (see ``filter_visits``).
        metric_keys: Metrics to include; defaults to the whole catalogue.

    Returns:
        list[TimeSeriesPoint] ordered by date, one per day between the first
        and last visit day.  Empty when there are no dated visits.

    Raises:
        KeyError: if a metric key is not in the catalogue.
    """
    keys = resolve_metric_keys(metric_keys)
    visits = list(visits)
    if not visits:
        return []

    df = visits_to_frame(visits)
    undated = int(df['day'].isna().sum())
    if undated:
        logger.debug(f"Ignoring {undated} visits with unparseable dates")
        df = df[df['day'].notna()]
    if df.empty:
        return []

    grouped = df.groupby('day')
    table = pd.DataFrame({key: _bucket(grouped, key) for key in keys}, columns=keys)

    full_range = pd.date_range(df['day'].min(), df['day'].max(), freq='D')
    table = table.reindex(full_range)

    series = []
    for day, row in table.iterrows():
        values = {}
        for key in keys:
            value = row[key]
            values[key] = NO_DATA if pd.isna(value) else float(value)
        series.append(TimeSeriesPoint(date=day, values=values))

    logger.debug(f"Aggregated {len(df)} visits into {len(series)} daily points")
    return series


def series_to_records(series: Iterable[TimeSeriesPoint]) -> List[Dict]:
    """Chart rows ``{'date': 'YYYY-MM-DD', <metric>: value-or-None}``."""
    return [point.to_dict() for point in series]


def summarize_metrics(visits: Iterable[VisitRecord],
                      metric_keys: Optional[Iterable[str]] = None) -> Dict[str, Optional[float]]:
    """
    One snapshot value per metric over the whole visit set.

    Same sum/mean rule as the daily series; ``NO_DATA`` when no visit
    carries the metric.
    """
    keys = resolve_metric_keys(metric_keys)
    visits = list(visits)
    if not visits:
        return {key: NO_DATA for key in keys}
    df = visits_to_frame(visits)
    return {key: rollup(df[key], key) for key in keys}


def monthly_visit_counts(visits: Iterable[VisitRecord]) -> List[DistributionEntry]:
    """
    Visits per calendar month, oldest first.

    Only months that have visits appear.  Labels read like ``"Jan 2024"``;
    ``key`` holds the sortable ``"2024-01"`` form.
    """
    days = [v.parsed_date for v in visits]
    days = pd.Series([d for d in days if d is not None], dtype='datetime64[ns]')
    if days.empty:
        return []

    counts = days.dt.to_period('M').value_counts().sort_index()
    return [
        DistributionEntry(
            label=period.to_timestamp().strftime(MONTH_LABEL_FORMAT),
            count=int(count),
            key=str(period),
        )
        for period, count in counts.items()
    ]
