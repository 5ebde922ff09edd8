"""
Unit tests for the data models and DataFrame ingestion.
"""

import unittest
from pathlib import Path
import sys

import numpy as np
import pandas as pd

# Add parent directory to path to import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from hr_visit_analytics.core.utils import (
    parse_visit_date, to_number, to_count, normalize_answer, clean_label,
    to_id,
)
from hr_visit_analytics.hierarchy import natural_scope
from hr_visit_analytics.models import (
    Role, ScopeSelection, VisitRecord, TimeSeriesPoint,
    actors_from_frame, branches_from_frame, visits_from_frame,
)
from hr_visit_analytics.models.data_models import normalize_status, visits_to_frame
from tests.fixtures.sample_data import create_sample_frames


class TestValueCoercion(unittest.TestCase):
    """Test suite for the tolerant value helpers."""

    def test_parse_visit_date(self):
        self.assertEqual(parse_visit_date('2024-01-05T14:20:00'), pd.Timestamp('2024-01-05'))
        self.assertIsNone(parse_visit_date('yesterday-ish'))
        self.assertIsNone(parse_visit_date(None))
        self.assertIsNone(parse_visit_date(float('nan')))

    def test_parse_visit_date_drops_timezone(self):
        ts = parse_visit_date(pd.Timestamp('2024-01-05 10:00', tz='UTC'))
        self.assertIsNone(ts.tzinfo)
        self.assertEqual(ts, pd.Timestamp('2024-01-05'))

    def test_to_number(self):
        self.assertEqual(to_number('12.5'), 12.5)
        self.assertEqual(to_number(np.int64(3)), 3.0)
        self.assertIsNone(to_number('abc'))
        self.assertIsNone(to_number(np.nan))
        self.assertIsNone(to_number(float('inf')))
        self.assertIsNone(to_number(True))

    def test_to_count(self):
        self.assertEqual(to_count(7.0), 7)
        self.assertIsNone(to_count(-1))

    def test_normalize_answer(self):
        self.assertEqual(normalize_answer(' Yes '), 'yes')
        self.assertEqual(normalize_answer(False), 'no')
        self.assertIsNone(normalize_answer('maybe'))
        self.assertIsNone(normalize_answer(np.nan))

    def test_clean_label(self):
        self.assertEqual(clean_label('  Gold\xa0'), 'Gold')
        self.assertIsNone(clean_label('   '))
        self.assertIsNone(clean_label(np.nan))

    def test_to_id(self):
        self.assertEqual(to_id(7.0), '7')
        self.assertEqual(to_id(np.int64(7)), '7')
        self.assertEqual(to_id(' b1 '), 'b1')
        self.assertEqual(to_id(2.5), '2.5')
        self.assertIsNone(to_id(np.nan))
        self.assertIsNone(to_id(None))

    def test_normalize_status(self):
        self.assertEqual(normalize_status('Submitted'), 'submitted')
        self.assertEqual(normalize_status(None), 'submitted')
        self.assertEqual(normalize_status('DRAFT'), 'draft')


class TestModels(unittest.TestCase):
    """Test suite for model behaviour."""

    def test_scope_selection_normalises_ids(self):
        selection = ScopeSelection(vhr_ids=['v1', 'v1'], zhr_ids='z1')
        self.assertEqual(selection.vhr_ids, frozenset({'v1'}))
        self.assertEqual(selection.zhr_ids, frozenset({'z1'}))
        self.assertIs(selection.deepest_role, Role.ZHR)
        self.assertTrue(ScopeSelection().is_empty)
        self.assertIsNone(ScopeSelection().deepest_role)

    def test_visit_accessors(self):
        visit = VisitRecord('v', 'b1', 'br1', '2024-01-05',
                            numeric_metrics={'cwt_cases': '3'},
                            qualitative_answers={'qual_motivated': 'NO'})
        self.assertTrue(visit.is_submitted)
        self.assertEqual(visit.metric('cwt_cases'), 3.0)
        self.assertIsNone(visit.metric('er_percentage'))
        self.assertEqual(visit.answer('qual_motivated'), 'no')

    def test_status_normalised_on_construction(self):
        """Records built directly read their status like the table loader."""
        self.assertTrue(VisitRecord('x', 'b1', 'br1', '2024-01-01', status='Submitted').is_submitted)
        self.assertTrue(VisitRecord('x', 'b1', 'br1', '2024-01-01', status=None).is_submitted)
        self.assertEqual(VisitRecord('x', 'b1', 'br1', '2024-01-01', status=' DRAFT ').status, 'draft')

    def test_time_series_point_dict(self):
        point =TimeSeriesPoint(pd.Timestamp('2024-01-05'), {'cwt_cases': None})
        self.assertEqual(point.to_dict(), {'date': '2024-01-05', 'cwt_cases': None})

    def test_visits_to_frame(self):
        visits = [
            VisitRecord('a', 'b1', 'br1', '2024-01-05', numeric_metrics={'cwt_cases': 2}),
            VisitRecord('b', 'b1', 'br1', 'garbage'),
        ]
        df = visits_to_frame(visits)
        self.assertEqual(len(df), 2)
        self.assertTrue(pd.isna(df.loc[1, 'day']))
        self.assertTrue(np.isnan(df.loc[1, 'cwt_cases']))
        self.assertEqual(df.loc[0, 'cwt_cases'], 2.0)


class TestFrameIngestion(unittest.TestCase):
    """Test suite for building models from data store tables."""

    def setUp(self):
        """Set up test fixtures."""
        self.users, self.branches, self.visits = create_sample_frames()

    def test_actors(self):
        actors = actors_from_frame(self.users)
        self.assertEqual(len(actors), 11)
        chief = actors[0]
        self.assertIs(chief.role, Role.CHR)
        self.assertIsNone(chief.reports_to)
        self.assertEqual(actors[-1].reports_to, 'z3')

    def test_actors_missing_column(self):
        with self.assertRaises(ValueError) as context:
            actors_from_frame(self.users.drop(columns=['role']))
        self.assertIn("missing required columns", str(context.exception))

    def test_actors_unknown_role(self):
        users = pd.DataFrame({'id': ['x'], 'role': ['Intern']})
        with self.assertRaises(ValueError):
            actors_from_frame(users)

    def test_branches(self):
        branches = branches_from_frame(self.branches)
        self.assertEqual(branches[0].category, 'Gold')
        self.assertIsNone(branches[-1].category)

    def test_visits(self):
        visits = visits_from_frame(self.visits)
        first, second, third = visits

        self.assertEqual(first.metric('manning_percentage'), 80.0)
        self.assertEqual(first.answer('qual_safe_secure'), 'yes')
        self.assertTrue(first.hr_connect_conducted)
        self.assertEqual(first.hr_connect_invited, 10)
        self.assertEqual(first.performance_level, 'Good')

        self.assertEqual(second.status, 'submitted')
        self.assertNotIn('manning_percentage', second.numeric_metrics)
        self.assertFalse(second.hr_connect_conducted)
        self.assertIsNone(second.performance_level)

        self.assertEqual(third.status, 'draft')
        self.assertFalse(third.is_submitted)

    def test_integer_ids_keep_manager_links(self):
        """Integer ids with a blank root row still link to their managers."""
        users = pd.DataFrame({
            'id': [1, 2, 3],
            'role': ['VHR', 'ZHR', 'BHR'],
            'reports_to': [None, 1, 2],
        })
        actors = actors_from_frame(users)
        self.assertEqual([(a.id, a.reports_to) for a in actors],
                         [('1', None), ('2', '1'), ('3', '2')])
        self.assertEqual(natural_scope(actors, 'VHR', '1'), frozenset({'3'}))

    def test_integer_visit_ids(self):
        """Float-typed author ids match the string ids of the users table."""
        visits = pd.DataFrame({
            'id': [10, 11],
            'bhr_id': [3.0, float('nan')],
            'branch_id': [7, 8],
            'visit_date': ['2024-01-01', '2024-01-02'],
        })
        first, second = visits_from_frame(visits)
        self.assertEqual((first.id, first.author_id, first.branch_id), ('10', '3', '7'))
        self.assertIsNone(second.author_id)

    def test_visit_id_falls_back_to_index(self):
        visits = visits_from_frame(self.visits.drop(columns=['id']))
        self.assertEqual([v.id for v in visits], ['0', '1', '2'])


if __name__ == '__main__':
    unittest.main()
