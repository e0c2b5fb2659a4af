"""Test suite for the fightstats aggregation engine."""
