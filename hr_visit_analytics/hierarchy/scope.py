"""
Scope Resolution.

Turns a partial VHR / ZHR / BHR selection into the exact set of BHR ids whose
visits are in scope.

Resolution is strictly top-down and the most specific selection wins:

    1. BHRs selected  -> exactly those ids (that exist and are BHRs).
    2. ZHRs selected  -> every BHR reporting to one of them.
    3. VHRs selected  -> every BHR under any ZHR reporting to one of them.
    4. Nothing        -> the viewer's natural scope:
                           ZHR  -> BHRs reporting to the viewer
                           VHR  -> BHRs under the viewer's ZHRs
                           CHR  -> every BHR
                           BHR  -> the viewer

An active selection that matches nothing yields an EMPTY scope.  It never
falls back to the broader level, so downstream views show "no data for the
current filters" instead of silently showing everything.
"""

import logging
from typing import Iterable, List, Optional, FrozenSet, Union

from ..models.data_models import Actor, Role, ScopeSelection
from .org_tree import OrgTree

logger = logging.getLogger(__name__)


def _as_tree(actors: Union[OrgTree, Iterable[Actor]]) -> OrgTree:
    # Downward walks cannot loop, so a plain actor list is indexed without
    # the cycle check.
    if isinstance(actors, OrgTree):
        return actors
    return OrgTree(actors, validate=False)


def natural_scope(actors: Union[OrgTree, Iterable[Actor]], viewer_role,
                  viewer_id: Optional[str] = None) -> FrozenSet[str]:
    """
    BHR ids a viewer sees when no filter is selected.

    Without ``viewer_id`` the natural scope is the whole organisation, which
    is also what a CHR always sees.

    Args:
        actors: OrgTree or list of actors.
        viewer_role: Role (or role string) of the viewer.
        viewer_id: Id of the viewer.

    Returns:
        frozenset of BHR ids.
    """
    tree = _as_tree(actors)
    role = Role.parse(viewer_role)

    if viewer_id is None or role is Role.CHR:
        return tree.ids_of_role(Role.BHR)
    return tree.descendants_at([viewer_id], role, Role.BHR)


def resolve_scope(actors: Union[OrgTree, Iterable[Actor]], viewer_role,
                  selection: Optional[ScopeSelection] = None,
                  viewer_id: Optional[str] = None) -> FrozenSet[str]:
    """
    Resolve a filter selection to the set of in-scope BHR ids.

    Selections are not intersected with the viewer's natural scope; the
    option lists offered to the viewer (``selectable_children``) already
    restrict what can be picked.

    Args:
        actors: OrgTree or list of actors.
        viewer_role: Role (or role string) of the viewer.
        selection: Ids picked at each level.  None or empty means no filter.
        viewer_id: Id of the viewer, used for the natural scope.

    Returns:
        frozenset of BHR ids; empty when an active selection matches nothing.
    """
    tree = _as_tree(actors)
    selection = selection or ScopeSelection()

    if selection.bhr_ids:
        scope = tree.descendants_at(selection.bhr_ids, Role.BHR, Role.BHR)
        level = Role.BHR
    elif selection.zhr_ids:
        scope = tree.descendants_at(selection.zhr_ids, Role.ZHR, Role.BHR)
        level = Role.ZHR
    elif selection.vhr_ids:
        scope = tree.descendants_at(selection.vhr_ids, Role.VHR, Role.BHR)
        level = Role.VHR
    else:
        scope = natural_scope(tree, viewer_role, viewer_id)
        logger.debug(f"No selection; natural scope of {viewer_role} has {len(scope)} BHRs")
        return scope

    if not scope:
        logger.debug(f"{level.value} selection matched no BHRs; scope is empty")
    return scope


def selectable_children(actors: Union[OrgTree, Iterable[Actor]], role,
                        parent_ids: Optional[Iterable[str]] = None) -> List[Actor]:
    """
    Options for a cascading filter dropdown.

    Returns the ``role`` actors that sit under any of ``parent_ids`` (which
    may be at any higher tier).  With no parents, every ``role`` actor is
    offered.  The result follows the input order of the actor list.

    Example:
        CHR page, VHR "v1" picked -> ``selectable_children(tree, 'ZHR', ['v1'])``
        lists only the ZHRs in v1's vertical.
    """
    tree = _as_tree(actors)
    role = Role.parse(role)
    parent_ids = list(parent_ids or ())

    if not parent_ids:
        return tree.actors_of_role(role)

    allowed = set()
    for parent_id in parent_ids:
        parent = tree.get(parent_id)
        if parent is None:
            continue
        parent_role = parent.role
        if parent_role.tier <= role.tier:
            continue
        allowed |= tree.descendants_at([parent_id], parent_role, role)
    return [a for a in tree.actors_of_role(role) if a.id in allowed]
