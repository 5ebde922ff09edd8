"""Shared sample data for the test suite."""
