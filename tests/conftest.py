"""Shared fixtures for cyclecal tests."""

from collections.abc import Iterator
from datetime import date

import pytest

from cyclecal.engines.recurrence_engine import RecurrenceResolver
from cyclecal.engines.statistics_engine import CycleStatsEngine
from cyclecal.utils import dt_utils


@pytest.fixture
def resolver() -> RecurrenceResolver:
    """Return a RecurrenceResolver with default configuration."""
    return RecurrenceResolver()


@pytest.fixture
def stats_engine() -> CycleStatsEngine:
    """Return a CycleStatsEngine with default configuration."""
    return CycleStatsEngine()


@pytest.fixture
def today() -> date:
    """Return the fixed "today" used across tests."""
    return date(2026, 10, 18)


@pytest.fixture
def restore_default_timezone() -> Iterator[None]:
    """Restore dt_utils.DEFAULT_TIME_ZONE after a test changes it."""
    original = dt_utils.get_default_timezone()
    yield
    dt_utils.set_default_timezone(original)
