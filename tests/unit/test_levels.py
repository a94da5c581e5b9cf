"""
Unit tests for the level to severity mapping.

Tests cover:
- Exact bucket boundaries
- Monotonic mapping across all level numbers
- Records without a level
- Registration of the TRACE and SEVERE level names
"""

import logging

import pytest
from hypothesis import given, strategies as st

from appender.levels import FATAL, SEVERE, TRACE, severity_of
from telemetry.models import SeverityLevel


class TestSeverityBoundaries:
    """Tests for each bucket boundary."""

    @pytest.mark.parametrize("levelno, expected", [
        (TRACE, SeverityLevel.VERBOSE),
        (logging.DEBUG, SeverityLevel.VERBOSE),
        (logging.INFO - 1, SeverityLevel.VERBOSE),
        (logging.INFO, SeverityLevel.INFORMATION),
        (logging.WARNING - 1, SeverityLevel.INFORMATION),
        (logging.WARNING, SeverityLevel.WARNING),
        (logging.ERROR - 1, SeverityLevel.WARNING),
        (logging.ERROR, SeverityLevel.ERROR),
        (SEVERE - 1, SeverityLevel.ERROR),
        (SEVERE, SeverityLevel.CRITICAL),
        (logging.CRITICAL, SeverityLevel.CRITICAL),
        (FATAL, SeverityLevel.CRITICAL),
    ])
    def test_boundary(self, levelno, expected):
        assert severity_of(levelno) == expected

    def test_missing_level_maps_to_verbose(self):
        """A record without a level lands in the lowest bucket."""
        assert severity_of(None) == SeverityLevel.VERBOSE

    def test_notset_maps_to_verbose(self):
        assert severity_of(logging.NOTSET) == SeverityLevel.VERBOSE


class TestSeverityProperties:
    """Property-based tests for the mapping."""

    @given(st.integers(min_value=-100, max_value=200), st.integers(min_value=-100, max_value=200))
    def test_mapping_is_monotonic(self, a, b):
        low, high = sorted((a, b))
        assert severity_of(low) <= severity_of(high)

    @given(st.integers(min_value=-100, max_value=200))
    def test_every_level_maps_to_a_bucket(self, levelno):
        assert severity_of(levelno) in set(SeverityLevel)


class TestLevelNames:
    """Tests for the registered level names."""

    def test_trace_level_is_registered(self):
        assert logging.getLevelName(TRACE) == "TRACE"
        assert logging.getLevelName("TRACE") == TRACE

    def test_severe_level_is_registered(self):
        assert logging.getLevelName(SEVERE) == "SEVERE"
        assert logging.ERROR < SEVERE < logging.CRITICAL

    def test_fatal_is_critical(self):
        assert FATAL == logging.CRITICAL
