"""
Unit tests for the organisation tree and scope resolution.

Covers:
- Tree lookups and closures (descendants / ancestors)
- Cycle detection
- Scope resolution precedence and the empty-selection rule
- Cascading dropdown options
"""

import unittest
from pathlib import Path
import sys

# Add parent directory to path to import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from hr_visit_analytics.models import Actor, Role, ScopeSelection
from hr_visit_analytics.hierarchy import (
    OrgTree, OrgCycleError, resolve_scope, natural_scope, selectable_children,
)
from tests.fixtures.sample_data import create_sample_actors


class TestRole(unittest.TestCase):
    """Test suite for the Role enum."""

    def test_parse_is_case_insensitive(self):
        self.assertIs(Role.parse('zhr'), Role.ZHR)
        self.assertIs(Role.parse(' Vhr '), Role.VHR)
        self.assertIs(Role.parse(Role.CHR), Role.CHR)

    def test_parse_unknown_role(self):
        with self.assertRaises(ValueError) as context:
            Role.parse('CEO')
        self.assertIn("Unknown role", str(context.exception))

    def test_tier_navigation(self):
        self.assertEqual(Role.BHR.tier, 0)
        self.assertEqual(Role.CHR.tier, 3)
        self.assertIs(Role.BHR.parent, Role.ZHR)
        self.assertIsNone(Role.CHR.parent)
        self.assertIs(Role.VHR.child, Role.ZHR)
        self.assertIsNone(Role.BHR.child)


class TestOrgTree(unittest.TestCase):
    """Test suite for OrgTree lookups."""

    def setUp(self):
        """Set up test fixtures."""
        self.tree = OrgTree(create_sample_actors())

    def test_size_and_membership(self):
        self.assertEqual(len(self.tree), 11)
        self.assertIn('b1', self.tree)
        self.assertNotIn('ghost', self.tree)

    def test_children_filtered_by_role(self):
        """Direct reports come back in input order."""
        ids = [a.id for a in self.tree.children('z1', Role.BHR)]
        self.assertEqual(ids, ['b1', 'b2'])
        self.assertEqual(self.tree.children('z4', Role.BHR), [])

    def test_parent(self):
        self.assertEqual(self.tree.parent('b3').id, 'z2')
        self.assertIsNone(self.tree.parent('c1'))

    def test_descendants_from_vhr(self):
        result = self.tree.descendants_at(['v1'], Role.VHR, Role.BHR)
        self.assertEqual(result, frozenset({'b1', 'b2', 'b3'}))

    def test_descendants_from_chr_to_zhr(self):
        result = self.tree.descendants_at(['c1'], Role.CHR, Role.ZHR)
        self.assertEqual(result, frozenset({'z1', 'z2', 'z3', 'z4'}))

    def test_descendants_ignores_wrong_role(self):
        """A ZHR id passed as a VHR contributes nothing."""
        result = self.tree.descendants_at(['z1'], Role.VHR, Role.BHR)
        self.assertEqual(result, frozenset())

    def test_descendants_upward_rejected(self):
        with self.assertRaises(ValueError):
            self.tree.descendants_at(['b1'], Role.BHR, Role.ZHR)

    def test_ancestor_at(self):
        self.assertEqual(self.tree.ancestor_at('b4', Role.ZHR).id, 'z3')
        self.assertEqual(self.tree.ancestor_at('b4', Role.VHR).id, 'v2')
        self.assertEqual(self.tree.ancestor_at('b4', Role.CHR).id, 'c1')

    def test_ancestor_at_own_role(self):
        self.assertEqual(self.tree.ancestor_at('z1', Role.ZHR).id, 'z1')

    def test_ancestor_at_dangling(self):
        """A broken reports_to chain yields None."""
        tree = OrgTree([Actor('b9', 'BHR', 'missing')])
        self.assertIsNone(tree.ancestor_at('b9', Role.ZHR))
        self.assertIsNone(tree.ancestor_at('nobody', Role.ZHR))

    def test_mis_tiered_report_not_descended(self):
        """A BHR reporting straight to a VHR is outside the VHR's closure."""
        actors = [
            Actor('v1', 'VHR'),
            Actor('z1', 'ZHR', 'v1'),
            Actor('b1', 'BHR', 'z1'),
            Actor('b2', 'BHR', 'v1'),
        ]
        tree = OrgTree(actors)
        self.assertEqual(tree.descendants_at(['v1'], Role.VHR, Role.BHR), frozenset({'b1'}))


class TestOrgCycles(unittest.TestCase):
    """Test suite for reports_to cycle handling."""

    def setUp(self):
        """Set up test fixtures."""
        self.cyclic = [
            Actor('z1', 'ZHR', 'z2'),
            Actor('z2', 'ZHR', 'z1'),
            Actor('b1', 'BHR', 'z1'),
        ]

    def test_validate_detects_cycle(self):
        with self.assertRaises(OrgCycleError) as context:
            OrgTree(self.cyclic)
        self.assertIn("cycle", str(context.exception))

    def test_cycle_error_is_value_error(self):
        self.assertTrue(issubclass(OrgCycleError, ValueError))

    def test_self_loop_detected(self):
        with self.assertRaises(OrgCycleError):
            OrgTree([Actor('v1', 'VHR', 'v1')])

    def test_ancestor_walk_is_bounded(self):
        """Without eager validation the upward walk still terminates."""
        tree = OrgTree(self.cyclic, validate=False)
        with self.assertRaises(OrgCycleError):
            tree.ancestor_at('b1', Role.VHR)

    def test_acyclic_tree_validates(self):
        tree = OrgTree(create_sample_actors(), validate=False)
        self.assertIs(tree.validate(), tree)


class TestScopeResolution(unittest.TestCase):
    """Test suite for resolve_scope / natural_scope."""

    def setUp(self):
        """Set up test fixtures."""
        self.actors = create_sample_actors()
        self.tree = OrgTree(self.actors)

    def test_natural_scope_per_role(self):
        self.assertEqual(natural_scope(self.tree, 'ZHR', 'z1'), frozenset({'b1', 'b2'}))
        self.assertEqual(natural_scope(self.tree, 'VHR', 'v2'), frozenset({'b4'}))
        self.assertEqual(natural_scope(self.tree, 'CHR', 'c1'), frozenset({'b1', 'b2', 'b3', 'b4'}))
        self.assertEqual(natural_scope(self.tree, 'BHR', 'b3'), frozenset({'b3'}))

    def test_natural_scope_without_viewer(self):
        self.assertEqual(natural_scope(self.actors, 'ZHR'), frozenset({'b1', 'b2', 'b3', 'b4'}))

    def test_no_selection_uses_natural_scope(self):
        self.assertEqual(resolve_scope(self.tree, 'VHR', None, viewer_id='v1'),
                         frozenset({'b1', 'b2', 'b3'}))

    def test_bhr_selection_wins(self):
        """The most specific level overrides the broader ones."""
        selection = ScopeSelection(vhr_ids={'v2'}, zhr_ids={'z3'}, bhr_ids={'b1'})
        self.assertEqual(resolve_scope(self.tree, 'CHR', selection), frozenset({'b1'}))

    def test_zhr_selection(self):
        selection = ScopeSelection(vhr_ids={'v2'}, zhr_ids={'z1', 'z2'})
        self.assertEqual(resolve_scope(self.tree, 'CHR', selection), frozenset({'b1', 'b2', 'b3'}))

    def test_vhr_selection(self):
        selection = ScopeSelection(vhr_ids=['v1', 'v2'])
        self.assertEqual(resolve_scope(self.tree, 'CHR', selection),
                         frozenset({'b1', 'b2', 'b3', 'b4'}))

    def test_selected_zhr_without_bhrs_is_empty(self):
        """An active selection that matches nothing never widens."""
        selection = ScopeSelection(zhr_ids={'z4'})
        self.assertEqual(resolve_scope(self.tree, 'CHR', selection), frozenset())

    def test_unknown_bhr_ids_dropped(self):
        selection = ScopeSelection(bhr_ids={'b2', 'ghost'})
        self.assertEqual(resolve_scope(self.tree, 'ZHR', selection, 'z1'), frozenset({'b2'}))

    def test_selection_of_wrong_role_is_empty(self):
        selection = ScopeSelection(zhr_ids={'b1'})
        self.assertEqual(resolve_scope(self.tree, 'CHR', selection), frozenset())

    def test_scope_monotonic_in_selection(self):
        """Adding ids at one level never shrinks the scope."""
        smaller = resolve_scope(self.tree, 'CHR', ScopeSelection(zhr_ids={'z1'}))
        larger = resolve_scope(self.tree, 'CHR', ScopeSelection(zhr_ids={'z1', 'z3'}))
        self.assertTrue(smaller <= larger)

    def test_accepts_plain_actor_list(self):
        selection = ScopeSelection(zhr_ids='z2')
        self.assertEqual(resolve_scope(self.actors, 'CHR', selection), frozenset({'b3'}))


class TestSelectableChildren(unittest.TestCase):
    """Test suite for cascading dropdown options."""

    def setUp(self):
        """Set up test fixtures."""
        self.tree = OrgTree(create_sample_actors())

    def test_all_when_no_parent(self):
        ids = [a.id for a in selectable_children(self.tree, 'ZHR')]
        self.assertEqual(ids, ['z1', 'z2', 'z3', 'z4'])

    def test_restricted_by_vhr(self):
        ids = [a.id for a in selectable_children(self.tree, 'ZHR', ['v2'])]
        self.assertEqual(ids, ['z3', 'z4'])

    def test_skips_tiers(self):
        """A VHR parent restricts the BHR list through its ZHRs."""
        ids = [a.id for a in selectable_children(self.tree, 'BHR', ['v1'])]
        self.assertEqual(ids, ['b1', 'b2', 'b3'])

    def test_unknown_parent_offers_nothing(self):
        self.assertEqual(selectable_children(self.tree, 'BHR', ['ghost']), [])


if __name__ == '__main__':
    unittest.main()
