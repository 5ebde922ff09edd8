"""
Entity Distribution.

Counts visits per organisation node one level below the current scope, for
the pie / bar "visits overview" charts:

    viewer   selection        grouped by
    ------   ---------------  ----------
    CHR      none             VHR
    CHR      VHR(s)           ZHR
    CHR      ZHR(s) / BHR(s)  BHR
    VHR      none             ZHR
    VHR      ZHR(s) / BHR(s)  BHR
    ZHR      any              BHR
    BHR      any              BHR

Each visit is attributed by walking ``reports_to`` upward from its author
until an actor of the grouping tier is reached.  A visit whose chain never
reaches that tier (unknown author, dangling manager) is left out of the
distribution rather than being credited to the wrong node.  The walk is
bounded by the tier depth, so a ``reports_to`` cycle raises
``OrgCycleError`` instead of looping.

Branch and free-text field distributions (visits per branch, performance
level mix) live here too since they share the same output shape.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Union

from ..models.data_models import (
    Actor, Branch, DistributionEntry, Role, ScopeSelection, VisitRecord,
)
from ..hierarchy.org_tree import OrgTree

logger = logging.getLogger(__name__)


def grouping_role_for(viewer_role, selection: Optional[ScopeSelection] = None) -> Role:
    """
    Pick the tier to group a distribution by.

    The grouping tier is one level below the deepest active selection, or
    one level below the viewer when nothing is selected.  BHR is the floor.
    """
    role = Role.parse(viewer_role)
    selection = selection or ScopeSelection()
    deepest = selection.deepest_role
    anchor = deepest if deepest is not None and deepest.tier < role.tier else role
    return anchor.child or Role.BHR


def _sorted_entries(counts: Counter, labels: Dict[str, str]) -> List[DistributionEntry]:
    entries = [
        DistributionEntry(label=labels.get(key, key), count=count, key=key)
        for key, count in counts.items()
    ]
    entries.sort(key=lambda e: (-e.count, e.label))
    return entries


def distribute_by_role(visits: Iterable[VisitRecord],
                       actors: Union[OrgTree, Iterable[Actor]],
                       grouping_role) -> List[DistributionEntry]:
    """
    Visit counts per ancestor at ``grouping_role``.

    Args:
        visits: Filtered visits.
        actors: OrgTree or list of actors.
        grouping_role: Tier to group by (Role or role string).

    Returns:
        list[DistributionEntry] sorted by count, highest first (ties by
        label).  ``key`` is the actor id, ``label`` its display name.

    Raises:
        OrgCycleError: if an ancestor walk hits a ``reports_to`` cycle.
    """
    tree = actors if isinstance(actors, OrgTree) else OrgTree(actors, validate=False)
    role = Role.parse(grouping_role)

    counts = Counter()
    labels = {}
    skipped = 0
    for visit in visits:
        ancestor = tree.ancestor_at(visit.author_id, role)
        if ancestor is None:
            skipped += 1
            continue
        counts[ancestor.id] += 1
        labels[ancestor.id] = ancestor.label

    if skipped:
        logger.debug(f"{skipped} visits have no {role.value} ancestor; excluded from distribution")
    return _sorted_entries(counts, labels)


def distribute_by_branch(visits: Iterable[VisitRecord],
                         branches: Iterable[Branch]) -> List[DistributionEntry]:
    """Visit counts per branch, labelled with the branch name."""
    labels = {b.id: b.label for b in branches}
    counts = Counter(v.branch_id for v in visits)
    return _sorted_entries(counts, labels)


def distribute_by_field(visits: Iterable[VisitRecord], field_name: str) -> List[DistributionEntry]:
    """
    Visit counts per value of a free-text visit attribute.

    Visits where the attribute is empty are skipped, matching the
    performance-level pie of the BHR analytics page.
    """
    counts = Counter()
    for visit in visits:
        value = getattr(visit, field_name)
        if value:
            counts[str(value)] += 1
    return _sorted_entries(counts, {})
