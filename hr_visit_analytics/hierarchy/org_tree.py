"""
Organisation tree.

In-memory index over the flat user list.  Each ``Actor`` points at its
manager through ``reports_to``; the tree inverts those edges so that both
directions can be walked cheaply:

    CHR
     └── VHR
          └── ZHR
               └── BHR   (files visits)

Walking down (``descendants_at``) powers scope resolution.  Walking up
(``ancestor_at``) powers the entity distributor, which attributes each visit
to the author's zonal / vertical head.

Integrity rules:
    - Unknown ids and dangling ``reports_to`` references are tolerated; they
      simply contribute nothing to any closure.
    - A cycle in ``reports_to`` is rejected with ``OrgCycleError``.  It is
      detected eagerly by ``validate()`` and, as a second line, every upward
      walk is bounded by ``MAX_TIER_DEPTH`` steps.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, FrozenSet

from ..core.config import MAX_TIER_DEPTH
from ..models.data_models import Actor, Role

logger = logging.getLogger(__name__)


class OrgCycleError(ValueError):
    """Raised when ``reports_to`` edges loop back on themselves."""


class OrgTree:
    """
    Read-only lookups over the organisation.

    Usage:
        >>> tree = OrgTree(actors)
        >>> tree.descendants_at(['z1'], Role.ZHR, Role.BHR)
        frozenset({'b1', 'b2'})
        >>> tree.ancestor_at('b1', Role.VHR).id
        'v1'

    Attributes:
        _actors (dict): id -> Actor.
        _children (dict): manager id -> list of direct report ids, in input
            order.
    """

    def __init__(self, actors: Iterable[Actor], validate: bool = True):
        """
        Index the actors.

        Args:
            actors: Every organisation member.
            validate: Check for ``reports_to`` cycles immediately and raise
                ``OrgCycleError`` if one is found.
        """
        self._actors: Dict[str, Actor] = {}
        self._children: Dict[str, List[str]] = defaultdict(list)

        for actor in actors:
            if actor.id in self._actors:
                logger.warning(f"Duplicate actor id '{actor.id}'; keeping the last entry")
            self._actors[actor.id] = actor

        for actor in self._actors.values():
            if actor.reports_to:
                self._children[actor.reports_to].append(actor.id)

        if validate:
            self.validate()

    def __len__(self) -> int:
        return len(self._actors)

    def __contains__(self, actor_id) -> bool:
        return actor_id in self._actors

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, actor_id: Optional[str]) -> Optional[Actor]:
        if actor_id is None:
            return None
        return self._actors.get(actor_id)

    def has_role(self, actor_id: str, role: Role) -> bool:
        actor = self._actors.get(actor_id)
        return actor is not None and actor.role is role

    def actors_of_role(self, role: Role) -> List[Actor]:
        """All actors of ``role`` in input order."""
        return [a for a in self._actors.values() if a.role is role]

    def ids_of_role(self, role: Role) -> FrozenSet[str]:
        return frozenset(a.id for a in self._actors.values() if a.role is role)

    def children(self, actor_id: str, role: Optional[Role] = None) -> List[Actor]:
        """Direct reports of ``actor_id``, optionally restricted to ``role``."""
        result = []
        for child_id in self._children.get(actor_id, ()):
            child = self._actors[child_id]
            if role is None or child.role is role:
                result.append(child)
        return result

    def parent(self, actor_id: str) -> Optional[Actor]:
        """The manager of ``actor_id``; None for roots and dangling links."""
        actor = self._actors.get(actor_id)
        if actor is None or not actor.reports_to:
            return None
        return self._actors.get(actor.reports_to)

    # ------------------------------------------------------------------
    # Closures
    # ------------------------------------------------------------------

    def descendants_at(self, actor_ids: Iterable[str], from_role: Role,
                       to_role: Role) -> FrozenSet[str]:
        """
        Ids of every ``to_role`` actor below the given ``from_role`` actors.

        The walk descends one tier at a time and only follows edges to the
        next tier down, so a mis-tiered report is not picked up.  Ids that do
        not exist or are not ``from_role`` actors are ignored.

        Args:
            actor_ids: Starting actors.
            from_role: Tier of the starting actors.
            to_role: Tier to stop at (must not be above ``from_role``).

        Returns:
            frozenset of actor ids (possibly empty).
        """
        if to_role.tier > from_role.tier:
            raise ValueError(f"Cannot descend from {from_role.value} to {to_role.value}")

        frontier = {i for i in actor_ids if self.has_role(i, from_role)}
        role = from_role
        while role is not to_role and frontier:
            role = role.child
            frontier = {
                child.id
                for parent_id in frontier
                for child in self.children(parent_id, role)
            }
        return frozenset(frontier)

    def ancestor_at(self, actor_id: str, role: Role) -> Optional[Actor]:
        """
        Walk up from ``actor_id`` to the first actor of ``role``.

        Returns the actor itself when it already has ``role``.  Returns None
        when the chain ends (root or dangling ``reports_to``) before reaching
        the tier.

        Raises:
            OrgCycleError: if the walk exceeds ``MAX_TIER_DEPTH`` steps.
        """
        current = self._actors.get(actor_id)
        steps = 0
        while current is not None:
            if current.role is role:
                return current
            if not current.reports_to:
                return None
            steps += 1
            if steps > MAX_TIER_DEPTH:
                raise OrgCycleError(
                    f"reports_to chain from '{actor_id}' exceeds {MAX_TIER_DEPTH} tiers; "
                    f"the organisation tree contains a cycle"
                )
            current = self._actors.get(current.reports_to)
        return None

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def validate(self) -> 'OrgTree':
        """
        Check the tree for cycles and tier mismatches.

        Cycles raise ``OrgCycleError``.  Dangling references and managers that
        are not exactly one tier up are logged and otherwise tolerated.

        Returns:
            OrgTree: Self, for method chaining.
        """
        settled = set()
        for start_id in self._actors:
            path = []
            on_path = set()
            current_id = start_id
            while current_id in self._actors and current_id not in settled:
                if current_id in on_path:
                    cycle = path[path.index(current_id):] + [current_id]
                    raise OrgCycleError(f"reports_to cycle detected: {' -> '.join(cycle)}")
                path.append(current_id)
                on_path.add(current_id)
                current_id = self._actors[current_id].reports_to
            settled.update(path)

        for actor in self._actors.values():
            if not actor.reports_to:
                continue
            manager = self._actors.get(actor.reports_to)
            if manager is None:
                logger.debug(f"Actor '{actor.id}' reports to unknown id '{actor.reports_to}'")
            elif manager.role is not actor.role.parent:
                logger.warning(
                    f"Actor '{actor.id}' ({actor.role.value}) reports to "
                    f"'{manager.id}' ({manager.role.value}); expected a "
                    f"{actor.role.parent.value if actor.role.parent else 'root'} manager"
                )
        return self
