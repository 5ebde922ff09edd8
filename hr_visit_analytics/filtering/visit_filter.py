"""
Visit filter pipeline.

Applies the resolved scope, an optional branch selection and an optional
date window to a raw visit list.  The steps always run in the same order:

    1. keep submitted visits only
    2. keep visits whose author is in scope
    3. keep visits at the selected branches (empty selection = all branches)
    4. keep visits whose date parses and falls inside the window

The function is pure and preserves the input order, so applying it twice
with the same arguments returns the same list.
"""

import logging
from typing import Iterable, List, Optional

from ..models.data_models import DateWindow, VisitRecord

logger = logging.getLogger(__name__)


def filter_visits(visits: Iterable[VisitRecord], scope: Iterable[str],
                  branch_ids: Optional[Iterable[str]] = None,
                  window: Optional[DateWindow] = None) -> List[VisitRecord]:
    """
    Filter visits down to the current dashboard selection.

    Args:
        visits: Raw visit records.
        scope: In-scope BHR ids.  An empty scope yields an empty result.
        branch_ids: Selected branch ids; None or empty means all branches.
        window: Date window; None means unbounded.

    Returns:
        list[VisitRecord] in input order.
    """
    scope = frozenset(scope)
    branch_ids = frozenset(branch_ids or ())

    result = [v for v in visits if v.is_submitted]
    submitted = len(result)

    result = [v for v in result if v.author_id in scope]

    if branch_ids:
        result = [v for v in result if v.branch_id in branch_ids]

    if window is not None:
        if window.is_empty:
            result = []
        else:
            kept = []
            for visit in result:
                day = visit.parsed_date
                if day is None:
                    logger.debug(f"Dropping visit '{visit.id}': unparseable date {visit.visit_date!r}")
                    continue
                if window.contains(day):
                    kept.append(visit)
            result = kept

    logger.debug(f"Visit filter kept {len(result)} of {submitted} submitted visits")
    return result


def sort_visits_by_date(visits: Iterable[VisitRecord],
                        descending: bool = True) -> List[VisitRecord]:
    """
    Order visits by date for the "visits made" tables.

    Newest first by default.  Visits with an unparseable date go last in
    either direction; ties keep their input order.
    """
    visits = list(visits)
    dated = [(v.parsed_date, i, v) for i, v in enumerate(visits)]
    valid = [d for d in dated if d[0] is not None]
    invalid = [d[2] for d in dated if d[0] is None]

    if descending:
        valid.sort(key=lambda d: (-d[0].value, d[1]))
    else:
        valid.sort(key=lambda d: (d[0].value, d[1]))
    return [d[2] for d in valid] + invalid

