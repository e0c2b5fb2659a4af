"""Shared doubles and data builders for the test suite."""
