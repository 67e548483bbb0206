"""Engine modules for cyclecal.

Contains the two computation engines:
- recurrence_engine: Next occurrence and reminder dates for yearly events
- statistics_engine: Cycle history aggregates, prediction and confidence
"""

from .recurrence_engine import (
    EventSummary,
    MonthlyReminder,
    OccurrenceResult,
    RecurrenceResolver,
    RecurringEvent,
)
from .statistics_engine import CycleInterval, CycleStats, CycleStatsEngine

__all__ = [
    "CycleInterval",
    "CycleStats",
    "CycleStatsEngine",
    "EventSummary",
    "MonthlyReminder",
    "OccurrenceResult",
    "RecurrenceResolver",
    "RecurringEvent",
]
