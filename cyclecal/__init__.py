"""Yearly recurrence resolution and cycle statistics on civil dates.

Both engines are pure: the caller passes already-fetched records and an
explicit "today", and gets back plain result objects with ``to_dict()``
serializers.
"""

from .engines import (
    CycleInterval,
    CycleStats,
    CycleStatsEngine,
    EventSummary,
    MonthlyReminder,
    OccurrenceResult,
    RecurrenceResolver,
    RecurringEvent,
)
from .exceptions import CycleCalError, InvalidDateError, PreconditionViolation

__all__ = [
    "CycleCalError",
    "CycleInterval",
    "CycleStats",
    "CycleStatsEngine",
    "EventSummary",
    "InvalidDateError",
    "MonthlyReminder",
    "OccurrenceResult",
    "PreconditionViolation",
    "RecurrenceResolver",
    "RecurringEvent",
]
