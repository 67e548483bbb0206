"""Recurrence Engine - next occurrence and reminder dates for calendar events.

Resolves stored events (seasonal events, anniversaries) that may repeat
yearly into their next occurrence relative to a caller-supplied "today",
and derives the reminder date a configurable number of days before it.

Design Principles:
    - Stateless: Operates on passed records, holds only immutable config
    - Deterministic: "today" is always a parameter, never read from a clock
    - Civil dates only: every input date is reduced to (year, month, day)
      before any arithmetic, so no timezone can shift a day

Leap-day policy: a Feb 29 event occurs on Feb 28 in non-leap years and
on Feb 29 again in leap years.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..exceptions import PreconditionViolation
from ..utils.dt_utils import (
    anniversary_in_year,
    day_in_month,
    days_between,
    to_civil_date,
)

if TYPE_CHECKING:
    from ..type_defs import (
        DateInput,
        EventSummaryData,
        MonthlyReminderData,
        OccurrenceData,
        RecurrenceConfig,
    )


def _record_flag(record: Mapping[str, Any], key: str) -> bool:
    """Read a boolean record field; "false" strings stay False.

    Raises:
        PreconditionViolation: If the value is not a recognizable boolean.
    """
    value = record.get(key)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in const.FLAG_TRUE_VALUES:
            return True
        if text in const.FLAG_FALSE_VALUES:
            return False
    raise PreconditionViolation(key, value, "expected a boolean flag")


# =============================================================================
# Records and Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class RecurringEvent:
    """A stored calendar event, normalized for the resolver.

    ``event_date`` accepts anything to_civil_date() accepts and is stored as
    a civil date.

    Attributes:
        event_date: Stored event date
        is_recurring: True if the event repeats every year
        reminder_days: Days before the occurrence to remind; 0 = no reminder
        title: Display title, carried through to results
        event_type: Category used by summarize_events (e.g., "holiday")
        event_id: Caller's record id, carried through to results
        monthly_reminder: True if the event wants a reminder every month
        monthly_reminder_day: Day of month for the monthly reminder
                              (defaults to the event's own day)
    """

    event_date: date
    is_recurring: bool = False
    reminder_days: int = const.DEFAULT_REMINDER_DAYS
    title: str | None = None
    event_type: str | None = None
    event_id: str | None = None
    monthly_reminder: bool = False
    monthly_reminder_day: int | None = None

    def __post_init__(self) -> None:
        """Normalize the event date and validate offsets."""
        object.__setattr__(self, "event_date", to_civil_date(self.event_date))

        if self.reminder_days < 0:
            raise PreconditionViolation(
                const.FIELD_REMINDER_DAYS,
                self.reminder_days,
                "reminder offset must not be negative",
            )
        if self.monthly_reminder_day is not None and not (
            1 <= self.monthly_reminder_day <= 31
        ):
            raise PreconditionViolation(
                const.FIELD_MONTHLY_REMINDER_DAY,
                self.monthly_reminder_day,
                "day of month must be between 1 and 31",
            )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> RecurringEvent:
        """Build a RecurringEvent from a stored record mapping.

        Reads ``eventDate`` (falling back to ``date``), ``isRecurring``,
        ``reminderDays`` (falling back to ``reminderOffsetDays``), and the
        optional ``id``/``_id``, ``title``, ``type``, ``monthlyReminder`` and
        ``monthlyReminderDay`` fields.

        Raises:
            InvalidDateError: If the event date is missing or malformed.
            PreconditionViolation: If an offset is negative or out of range,
                or a flag is not a recognizable boolean.
        """
        raw_date = record.get(const.FIELD_EVENT_DATE)
        if raw_date is None:
            raw_date = record.get(const.FIELD_DATE)

        reminder_days = record.get(const.FIELD_REMINDER_DAYS)
        if reminder_days is None:
            reminder_days = record.get(const.FIELD_REMINDER_OFFSET_DAYS)

        event_id = record.get(const.FIELD_ID)
        if event_id is None:
            event_id = record.get(const.FIELD_MONGO_ID)

        monthly_day = record.get(const.FIELD_MONTHLY_REMINDER_DAY)

        return cls(
            event_date=to_civil_date(raw_date),
            is_recurring=_record_flag(record, const.FIELD_IS_RECURRING),
            reminder_days=int(reminder_days or const.DEFAULT_REMINDER_DAYS),
            title=record.get(const.FIELD_TITLE),
            event_type=record.get(const.FIELD_TYPE),
            event_id=str(event_id) if event_id is not None else None,
            monthly_reminder=_record_flag(record, const.FIELD_MONTHLY_REMINDER),
            monthly_reminder_day=int(monthly_day) if monthly_day is not None else None,
        )


@dataclass(frozen=True, slots=True)
class OccurrenceResult:
    """Resolved occurrence and reminder for one event.

    ``days_until_occurrence`` always refers to ``next_occurrence``. When a
    recurring event's reminder had already elapsed, ``reminder_date`` and
    ``days_until_reminder`` refer to the occurrence one year later instead.
    """

    next_occurrence: date
    reminder_date: date
    days_until_occurrence: int
    days_until_reminder: int
    is_recurring: bool
    title: str | None = None
    event_id: str | None = None

    @property
    def reminder_upcoming(self) -> bool:
        """Return True if the reminder is today or later."""
        return self.days_until_reminder >= 0

    def to_dict(self) -> OccurrenceData:
        """Serialize to the camelCase shape the frontend consumes."""
        data: OccurrenceData = {
            "eventDate": self.next_occurrence.isoformat(),
            "reminderDate": self.reminder_date.isoformat(),
            "daysUntilReminder": self.days_until_reminder,
            "daysUntilEvent": self.days_until_occurrence,
            "isRecurring": self.is_recurring,
        }
        if self.event_id is not None:
            data["id"] = self.event_id
        if self.title is not None:
            data["title"] = self.title
        return data


@dataclass(frozen=True, slots=True)
class EventSummary:
    """Counts over a collection of events."""

    total_events: int
    upcoming_events: int
    events_by_type: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> EventSummaryData:
        """Serialize to the camelCase shape the frontend consumes."""
        return {
            "totalEvents": self.total_events,
            "upcomingEvents": self.upcoming_events,
            "eventsByType": dict(self.events_by_type),
        }


@dataclass(frozen=True, slots=True)
class MonthlyReminder:
    """This month's reminder for an event flagged for monthly reminders."""

    original_date: date
    reminder_date: date
    title: str | None = None
    event_id: str | None = None

    def to_dict(self) -> MonthlyReminderData:
        """Serialize to the camelCase shape the frontend consumes."""
        data: MonthlyReminderData = {
            "originalDate": self.original_date.isoformat(),
            "reminderDate": self.reminder_date.isoformat(),
        }
        if self.event_id is not None:
            data["id"] = self.event_id
        if self.title is not None:
            data["title"] = self.title
        return data


# =============================================================================
# Resolver
# =============================================================================


class RecurrenceResolver:
    """Resolve yearly recurrences and reminder dates on civil dates.

    Example:
        resolver = RecurrenceResolver()
        result = resolver.resolve(
            {"eventDate": "2024-02-29", "isRecurring": True, "reminderDays": 7},
            today=date(2025, 3, 15),
        )
        result.next_occurrence  # date(2026, 2, 28)
        result.reminder_date  # date(2026, 2, 21)
    """

    def __init__(self, config: RecurrenceConfig | None = None) -> None:
        """Initialize the resolver with configuration.

        Args:
            config: RecurrenceConfig TypedDict. Missing keys use defaults.
        """
        config = config or {}
        self._roll_elapsed_reminders = bool(
            config.get(
                const.CONF_ROLL_ELAPSED_REMINDERS,
                const.DEFAULT_ROLL_ELAPSED_REMINDERS,
            )
        )

    # -------------------------------------------------------------------------
    # Single event
    # -------------------------------------------------------------------------

    def next_occurrence(
        self, event_date: DateInput, is_recurring: bool, today: DateInput
    ) -> date:
        """Return the next occurrence of an event on or after ``today``.

        A one-off event is returned unchanged, even if it lies in the past.
        A yearly event is placed in today's year and advanced a year at a
        time until it is not before today.

        Raises:
            InvalidDateError: If either date is malformed.
        """
        original = to_civil_date(event_date)
        if not is_recurring:
            return original

        reference = to_civil_date(today)
        candidate = anniversary_in_year(original, reference.year)

        iteration = 0
        while (
            candidate < reference
            and iteration < const.MAX_DATE_CALCULATION_ITERATIONS
        ):
            iteration += 1
            candidate = anniversary_in_year(original, candidate.year + 1)

        if iteration >= const.MAX_DATE_CALCULATION_ITERATIONS:
            const.LOGGER.warning(
                "RecurrenceResolver: Max iterations reached for %s", original
            )

        return candidate

    def resolve(
        self, event: RecurringEvent | Mapping[str, Any], today: DateInput
    ) -> OccurrenceResult:
        """Resolve the next occurrence and reminder for one event.

        Args:
            event: RecurringEvent or a stored record mapping.
            today: The caller's current civil date.

        Returns:
            OccurrenceResult for the event.

        Raises:
            InvalidDateError: If the event date or ``today`` is malformed.
            PreconditionViolation: If the reminder offset is negative.
        """
        event = self._coerce_event(event)
        reference = to_civil_date(today)

        occurrence = self.next_occurrence(
            event.event_date, event.is_recurring, reference
        )
        offset = timedelta(days=event.reminder_days)
        reminder_date = occurrence - offset
        days_until_reminder = days_between(reference, reminder_date)

        # Offset longer than the lead time left: remind ahead of next year's
        # occurrence. days_until_occurrence keeps the nearer occurrence.
        if (
            event.is_recurring
            and days_until_reminder < 0
            and self._roll_elapsed_reminders
        ):
            later = anniversary_in_year(event.event_date, occurrence.year + 1)
            reminder_date = later - offset
            days_until_reminder = days_between(reference, reminder_date)
            const.LOGGER.debug(
                "RecurrenceResolver: Reminder for %s elapsed, rebased on %s",
                occurrence,
                later,
            )

        return OccurrenceResult(
            next_occurrence=occurrence,
            reminder_date=reminder_date,
            days_until_occurrence=days_between(reference, occurrence),
            days_until_reminder=days_until_reminder,
            is_recurring=event.is_recurring,
            title=event.title,
            event_id=event.event_id,
        )

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    def upcoming_reminders(
        self,
        events: Iterable[RecurringEvent | Mapping[str, Any]],
        today: DateInput,
    ) -> list[OccurrenceResult]:
        """Resolve every event and keep the reminders that are still ahead.

        Returns:
            Results with ``days_until_reminder >= 0``, soonest first. Events
            with equal lead time keep their input order.
        """
        reference = to_civil_date(today)
        results = [self.resolve(event, reference) for event in events]
        upcoming = [result for result in results if result.reminder_upcoming]
        return sorted(upcoming, key=lambda result: result.days_until_reminder)

    def upcoming_within(
        self,
        events: Iterable[RecurringEvent | Mapping[str, Any]],
        today: DateInput,
        days: int = const.DEFAULT_UPCOMING_WINDOW_DAYS,
    ) -> list[OccurrenceResult]:
        """Resolve every event and keep occurrences in the next ``days`` days.

        The window is inclusive at both ends: today and today + ``days``.
        One-off events in the past never qualify.

        Returns:
            Results soonest occurrence first; ties keep input order.

        Raises:
            PreconditionViolation: If ``days`` is negative.
        """
        if days < 0:
            raise PreconditionViolation("days", days, "window must not be negative")

        reference = to_civil_date(today)
        results = [self.resolve(event, reference) for event in events]
        within = [
            result
            for result in results
            if 0 <= result.days_until_occurrence <= days
        ]
        return sorted(within, key=lambda result: result.days_until_occurrence)

    def summarize_events(
        self,
        events: Iterable[RecurringEvent | Mapping[str, Any]],
        today: DateInput,
    ) -> EventSummary:
        """Count events in total, upcoming, and per type.

        Recurring events always count as upcoming; one-off events count when
        their date is today or later. Types are listed in first-seen order;
        events without a type are counted under "other".
        """
        reference = to_civil_date(today)
        coerced = [self._coerce_event(event) for event in events]

        upcoming = sum(
            1
            for event in coerced
            if event.is_recurring or event.event_date >= reference
        )
        by_type = Counter(
            event.event_type or const.EVENT_TYPE_OTHER for event in coerced
        )

        return EventSummary(
            total_events=len(coerced),
            upcoming_events=upcoming,
            events_by_type=dict(by_type),
        )

    def monthly_reminders(
        self,
        events: Iterable[RecurringEvent | Mapping[str, Any]],
        today: DateInput,
    ) -> list[MonthlyReminder]:
        """Return this month's reminders for events flagged monthly.

        The reminder falls on ``monthly_reminder_day`` (or the event's own
        day of month) in today's month, clamped to the month's last day.
        """
        reference = to_civil_date(today)
        reminders: list[MonthlyReminder] = []

        for raw_event in events:
            event = self._coerce_event(raw_event)
            if not event.monthly_reminder:
                continue
            day = event.monthly_reminder_day or event.event_date.day
            reminders.append(
                MonthlyReminder(
                    original_date=event.event_date,
                    reminder_date=day_in_month(reference.year, reference.month, day),
                    title=event.title,
                    event_id=event.event_id,
                )
            )

        return reminders

    # -------------------------------------------------------------------------
    # Private
    # -------------------------------------------------------------------------

    @staticmethod
    def _coerce_event(event: RecurringEvent | Mapping[str, Any]) -> RecurringEvent:
        """Return ``event`` as a RecurringEvent, parsing mappings."""
        if isinstance(event, RecurringEvent):
            return event
        return RecurringEvent.from_record(event)
