"""
Hierarchy modules for HR Visit Analytics.

Includes:
- Organisation tree index with cycle detection
- Scope resolution from filter selections to in-scope BHRs
"""

from .org_tree import OrgTree, OrgCycleError
from .scope import resolve_scope, natural_scope, selectable_children

__all__ = [
    'OrgTree',
    'OrgCycleError',
    'resolve_scope',
    'natural_scope',
    'selectable_children',
]
