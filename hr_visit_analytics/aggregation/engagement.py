"""
Employee engagement statistics.

Totals for the HR Connect sessions held during visits and for how many new
joiners and star performers the visits reached.
"""

import logging
from typing import Iterable

from ..core.utils import round_value
from ..models.data_models import CoverageStats, HRConnectStats, VisitRecord

logger = logging.getLogger(__name__)


def hr_connect_stats(visits: Iterable[VisitRecord]) -> HRConnectStats:
    """
    HR Connect totals.

    Only visits where a session was conducted contribute; missing head
    counts count as 0.  The participation rate is a whole percentage of
    participants over invitees, or 0 when nobody was invited.
    """
    stats = HRConnectStats()
    for visit in visits:
        if not visit.hr_connect_conducted:
            continue
        stats.sessions_conducted += 1
        stats.total_invited += visit.hr_connect_invited or 0
        stats.total_participants += visit.hr_connect_participants or 0

    if stats.total_invited > 0:
        stats.participation_rate = int(round(100 * stats.total_participants / stats.total_invited))
    return stats


def _coverage_pct(covered: int, total: int):
    if total <= 0:
        return None
    return round_value(100 * covered / total)


def coverage_stats(visits: Iterable[VisitRecord]) -> CoverageStats:
    """New-joiner and star-performer coverage across the visits."""
    stats = CoverageStats()
    for visit in visits:
        stats.new_employees_total += visit.new_employees_total or 0
        stats.new_employees_covered += visit.new_employees_covered or 0
        stats.star_employees_total += visit.star_employees_total or 0
        stats.star_employees_covered += visit.star_employees_covered or 0

    stats.new_coverage_pct = _coverage_pct(stats.new_employees_covered, stats.new_employees_total)
    stats.star_coverage_pct = _coverage_pct(stats.star_employees_covered, stats.star_employees_total)
    return stats
