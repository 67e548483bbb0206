"""Type definitions for cyclecal record and result shapes.

Input records arrive as plain mappings (already fetched and authorized by
the caller), so they are described with ``TypedDict``. Keys use the
camelCase spelling of the stored documents and of the frontend that
consumes the results.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime checks (missing keys,
bad dates, negative offsets) live in the ``from_record`` constructors of
the engine dataclasses.
"""

from datetime import date, datetime
from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00.000Z"
DateInput = date | datetime | str  # Anything to_civil_date() accepts


# =============================================================================
# Input Records
# =============================================================================


class RecurringEventRecord(TypedDict, total=False):
    """Stored calendar event (seasonal event or anniversary).

    ``eventDate`` is preferred; ``date`` is the stored document's field name
    and is used when ``eventDate`` is absent.
    """

    id: str
    title: str
    type: str
    eventDate: DateInput
    date: DateInput
    isRecurring: bool
    reminderDays: int  # 0 or absent = no reminder
    reminderOffsetDays: int  # Alias of reminderDays
    monthlyReminder: bool
    monthlyReminderDay: int  # 1-31, clamped to month length


class CycleIntervalRecord(TypedDict, total=False):
    """Stored cycle entry: a start/end interval with two tag sets."""

    startDate: DateInput
    endDate: DateInput | None  # Absent while the interval is ongoing
    symptoms: list[str]  # Tag set A
    moods: list[str]  # Tag set B
    mood: str  # Single-value form of tag set B


# =============================================================================
# Output Shapes (to_dict results)
# =============================================================================


class OccurrenceData(TypedDict):
    """Serialized OccurrenceResult."""

    id: NotRequired[str]
    title: NotRequired[str]
    eventDate: ISODate
    reminderDate: ISODate
    daysUntilReminder: int
    daysUntilEvent: int
    isRecurring: bool


class EventSummaryData(TypedDict):
    """Serialized EventSummary."""

    totalEvents: int
    upcomingEvents: int
    eventsByType: dict[str, int]


class MonthlyReminderData(TypedDict):
    """Serialized MonthlyReminder."""

    id: NotRequired[str]
    title: NotRequired[str]
    originalDate: ISODate
    reminderDate: ISODate


class CycleStatsData(TypedDict):
    """Serialized CycleStats."""

    averageCycleLength: int
    averagePeriodLength: float
    nextPredictedDate: ISODate
    commonSymptoms: list[str]
    commonMoods: list[str]
    totalCycles: int
    predictionConfidence: int
    cycleLengths: list[int]


# =============================================================================
# Engine Configuration
# =============================================================================


class RecurrenceConfig(TypedDict, total=False):
    """Configuration for RecurrenceResolver in recurrence_engine.py.

    All fields are optional (total=False) to support partial configuration.
    """

    roll_elapsed_reminders: bool  # Rebase an elapsed reminder on next year's occurrence


class StatsConfig(TypedDict, total=False):
    """Configuration for CycleStatsEngine in statistics_engine.py.

    All fields are optional (total=False) to support partial configuration.
    """

    default_interval_days: int  # Fallback interval length for a single interval
    confidence_spread_ceiling_days: float  # Std dev (days) mapped to zero confidence
    top_tags_limit: int  # Max entries in each common-tags list
