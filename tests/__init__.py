"""
HR Visit Analytics Test Suite

This package contains unit tests and fixtures for the scoping and
aggregation engine.

Run tests with:
    pytest tests/
    pytest tests/test_metrics.py -v
    pytest tests/test_hierarchy.py::TestScopeResolution -v
"""

__version__ = "1.0.0"
