"""Unit tests for recurrence_engine.py RecurrenceResolver.

Tests cover:
- One-off events (returned unchanged, even when past)
- Yearly events (current year, rolled to next year, today itself)
- Feb 29 policy (Feb 28 in non-leap years, Feb 29 again in leap years)
- Reminder dates, including offsets longer than the remaining lead time
- Record parsing (field aliases, stored instants, validation errors)
- Collections: upcoming reminders, look-ahead window, event summary, monthly
  reminders
"""

from __future__ import annotations

from datetime import date

import pytest

from cyclecal.engines.recurrence_engine import (
    OccurrenceResult,
    RecurrenceResolver,
    RecurringEvent,
)
from cyclecal.exceptions import InvalidDateError, PreconditionViolation

# =============================================================================
# One-off events
# =============================================================================


class TestNonRecurring:
    """One-off events are never moved."""

    def test_past_event_unchanged(self, resolver: RecurrenceResolver) -> None:
        """A past one-off event keeps its date; the caller shows it as passed."""
        event = RecurringEvent(event_date=date(2020, 5, 10))
        result = resolver.resolve(event, date(2026, 1, 1))

        assert result.next_occurrence == date(2020, 5, 10)
        assert result.days_until_occurrence < 0

    @pytest.mark.parametrize(
        "today", [date(2000, 1, 1), date(2026, 10, 18), date(2099, 12, 31)]
    )
    def test_unchanged_regardless_of_today(
        self, resolver: RecurrenceResolver, today: date
    ) -> None:
        """The occurrence of a one-off event never depends on today."""
        assert resolver.next_occurrence(date(2026, 6, 1), False, today) == date(
            2026, 6, 1
        )

    def test_elapsed_reminder_not_rolled(
        self, resolver: RecurrenceResolver, today: date
    ) -> None:
        """Only recurring events get their reminder rebased."""
        event = RecurringEvent(event_date=date(2026, 10, 20), reminder_days=7)
        result = resolver.resolve(event, today)

        assert result.reminder_date == date(2026, 10, 13)
        assert result.days_until_reminder == -5
        assert result.days_until_occurrence == 2
        assert not result.reminder_upcoming


# =============================================================================
# Yearly events
# =============================================================================


class TestYearlyRecurrence:
    """Yearly events land on the next occurrence on or after today."""

    def test_later_this_year(self, resolver: RecurrenceResolver, today: date) -> None:
        """An anniversary still ahead this year stays in this year."""
        event = RecurringEvent(date(2019, 12, 25), is_recurring=True, reminder_days=7)
        result = resolver.resolve(event, today)

        assert result.next_occurrence == date(2026, 12, 25)
        assert result.days_until_occurrence == 68
        assert result.reminder_date == date(2026, 12, 18)
        assert result.days_until_reminder == 61

    def test_already_passed_this_year(
        self, resolver: RecurrenceResolver, today: date
    ) -> None:
        """An anniversary already passed this year moves to next year."""
        event = RecurringEvent(date(2019, 3, 1), is_recurring=True)
        result = resolver.resolve(event, today)

        assert result.next_occurrence == date(2027, 3, 1)

    def test_today_counts_as_upcoming(
        self, resolver: RecurrenceResolver, today: date
    ) -> None:
        """An anniversary falling on today is not rolled forward."""
        event = RecurringEvent(date(2019, 10, 18), is_recurring=True)
        result = resolver.resolve(event, today)

        assert result.next_occurrence == today
        assert result.days_until_occurrence == 0
        assert result.days_until_reminder == 0

    def test_year_boundary(self, resolver: RecurrenceResolver) -> None:
        """Jan 1 seen from Dec 31 is the next day, in the next year."""
        result = resolver.resolve(
            RecurringEvent(date(2010, 1, 1), is_recurring=True), date(2025, 12, 31)
        )

        assert result.next_occurrence == date(2026, 1, 1)
        assert result.days_until_occurrence == 1

    def test_no_reminder_offset(self, resolver: RecurrenceResolver, today: date) -> None:
        """Offset 0 puts the reminder on the occurrence itself."""
        result = resolver.resolve(
            RecurringEvent(date(2019, 11, 5), is_recurring=True), today
        )

        assert result.reminder_date == result.next_occurrence
        assert result.days_until_reminder == result.days_until_occurrence

    @pytest.mark.parametrize(
        "today",
        [
            date(2025, 1, 1),
            date(2025, 2, 28),
            date(2025, 3, 1),
            date(2026, 7, 4),
            date(2027, 12, 31),
            date(2028, 2, 29),
        ],
    )
    def test_never_before_today(self, resolver: RecurrenceResolver, today: date) -> None:
        """A recurring event's next occurrence is never in the past."""
        for event_date in (date(2024, 2, 29), date(2020, 1, 1), date(2020, 12, 31)):
            assert resolver.next_occurrence(event_date, True, today) >= today

    def test_idempotent(self, resolver: RecurrenceResolver, today: date) -> None:
        """Resolving the same event twice gives identical results."""
        event = RecurringEvent(date(2019, 11, 1), is_recurring=True, reminder_days=30)

        assert resolver.resolve(event, today) == resolver.resolve(event, today)


# =============================================================================
# Feb 29 policy
# =============================================================================


class TestLeapDay:
    """Feb 29 events fall back to Feb 28 in non-leap years."""

    def test_rolls_past_non_leap_year(self, resolver: RecurrenceResolver) -> None:
        """Feb 29 seen from mid-March 2025 is Feb 28, 2026."""
        result = resolver.resolve(
            RecurringEvent(date(2024, 2, 29), is_recurring=True), date(2025, 3, 15)
        )

        assert result.next_occurrence == date(2026, 2, 28)

    def test_day_after_fallback(self, resolver: RecurrenceResolver) -> None:
        """Seen from Mar 1 of a non-leap year, the next one is a year later."""
        assert resolver.next_occurrence(
            date(2024, 2, 29), True, date(2025, 3, 1)
        ) == date(2026, 2, 28)

    def test_fallback_day_is_today(self, resolver: RecurrenceResolver) -> None:
        """Feb 28 of a non-leap year is the occurrence itself."""
        assert resolver.next_occurrence(
            date(2024, 2, 29), True, date(2025, 2, 28)
        ) == date(2025, 2, 28)

    def test_back_to_feb29_in_leap_year(self, resolver: RecurrenceResolver) -> None:
        """The next leap year gets Feb 29 again, not the clamped 28th."""
        assert resolver.next_occurrence(
            date(2024, 2, 29), True, date(2027, 3, 1)
        ) == date(2028, 2, 29)

    def test_never_feb29_in_non_leap_year(self, resolver: RecurrenceResolver) -> None:
        """No resolved date is an invalid Feb 29."""
        for year in range(2025, 2034):
            result = resolver.next_occurrence(date(2024, 2, 29), True, date(year, 1, 1))
            assert result.year == year
            assert result.day == (29 if year % 4 == 0 else 28)


# =============================================================================
# Reminders longer than the remaining lead time
# =============================================================================


class TestElapsedReminder:
    """Recurring reminders that already passed are rebased on next year."""

    def test_offset_longer_than_a_year(self, resolver: RecurrenceResolver) -> None:
        """A 400-day offset reminds ahead of the following year's occurrence."""
        event = RecurringEvent(date(2020, 6, 1), is_recurring=True, reminder_days=400)
        result = resolver.resolve(event, date(2026, 1, 10))

        # Displayed event date stays on the nearer occurrence
        assert result.next_occurrence == date(2026, 6, 1)
        assert result.days_until_occurrence == 142
        # Reminder counts back from Jun 1, 2027
        assert result.reminder_date == date(2026, 4, 27)
        assert result.days_until_reminder == 107
        assert result.days_until_occurrence >= 0
        assert result.reminder_upcoming

    def test_reminder_window_already_open(self, resolver: RecurrenceResolver) -> None:
        """A 30-day reminder 14 days before the event moves to next year."""
        event = RecurringEvent(date(2019, 11, 1), is_recurring=True, reminder_days=30)
        result = resolver.resolve(event, date(2026, 10, 18))

        assert result.next_occurrence == date(2026, 11, 1)
        assert result.days_until_occurrence == 14
        assert result.reminder_date == date(2027, 10, 2)
        assert result.days_until_reminder == 349

    def test_rebase_can_be_disabled(self) -> None:
        """With roll_elapsed_reminders off, the elapsed reminder is reported."""
        resolver = RecurrenceResolver({"roll_elapsed_reminders": False})
        event = RecurringEvent(date(2020, 6, 1), is_recurring=True, reminder_days=400)
        result = resolver.resolve(event, date(2026, 1, 10))

        assert result.reminder_date == date(2025, 4, 27)
        assert result.days_until_reminder < 0


# =============================================================================
# Record parsing
# =============================================================================


class TestRecords:
    """Mappings are accepted in the stored-document shape."""

    def test_resolve_mapping(self, resolver: RecurrenceResolver) -> None:
        """Stored instants and camelCase fields are understood."""
        result = resolver.resolve(
            {
                "eventDate": "2024-02-29T00:00:00.000Z",
                "isRecurring": True,
                "reminderDays": 7,
            },
            date(2025, 3, 15),
        )

        assert result.next_occurrence == date(2026, 2, 28)
        assert result.reminder_date == date(2026, 2, 21)

    def test_field_aliases(self) -> None:
        """date, reminderOffsetDays and _id are read when the primary keys are absent."""
        event = RecurringEvent.from_record(
            {
                "_id": "abc123",
                "title": "Anniversary",
                "type": "anniversary",
                "date": "2018-07-14",
                "isRecurring": True,
                "reminderOffsetDays": 3,
            }
        )

        assert event.event_date == date(2018, 7, 14)
        assert event.reminder_days == 3
        assert event.event_id == "abc123"
        assert event.event_type == "anniversary"

    def test_absent_reminder_means_none(self) -> None:
        """Missing reminder fields mean a zero offset."""
        event = RecurringEvent.from_record({"eventDate": "2026-01-01"})

        assert event.reminder_days == 0
        assert event.is_recurring is False

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (True, True),
            (False, False),
            ("true", True),
            ("True", True),
            ("false", False),
            ("FALSE", False),
            ("0", False),
            ("", False),
            (1, True),
            (0, False),
        ],
    )
    def test_flags_parsed(self, raw: object, expected: bool) -> None:
        """Boolean flags stored as strings are read by value, not truthiness."""
        event = RecurringEvent.from_record(
            {"eventDate": "2020-01-31", "isRecurring": raw, "monthlyReminder": raw}
        )

        assert event.is_recurring is expected
        assert event.monthly_reminder is expected

    def test_string_false_stays_one_off(
        self, resolver: RecurrenceResolver, today: date
    ) -> None:
        """A past event flagged "false" is not rolled forward."""
        result = resolver.resolve(
            {"eventDate": "2020-06-01", "isRecurring": "false"}, today
        )

        assert result.is_recurring is False
        assert result.next_occurrence == date(2020, 6, 1)

    @pytest.mark.parametrize("raw", ["maybe", 2, ["true"]])
    def test_unrecognized_flag_rejected(self, raw: object) -> None:
        """Values that are not booleans are rejected instead of guessed."""
        with pytest.raises(PreconditionViolation) as exc_info:
            RecurringEvent.from_record({"eventDate": "2020-01-31", "isRecurring": raw})

        assert exc_info.value.field == "isRecurring"

    def test_dataclass_normalizes_date(self) -> None:
        """RecurringEvent accepts strings and datetimes for event_date."""
        event = RecurringEvent(event_date="2024-02-29T23:30:00-05:00")  # type: ignore[arg-type]

        assert event.event_date == date(2024, 2, 29)

    @pytest.mark.parametrize(
        "record",
        [
            {"eventDate": "2025-13-01"},
            {"eventDate": "not-a-date"},
            {"isRecurring": True},
        ],
    )
    def test_invalid_date_rejected(
        self, resolver: RecurrenceResolver, today: date, record: dict
    ) -> None:
        """Malformed or missing event dates raise instead of defaulting."""
        with pytest.raises(InvalidDateError):
            resolver.resolve(record, today)

    def test_invalid_today_rejected(self, resolver: RecurrenceResolver) -> None:
        """A malformed today is rejected as well."""
        with pytest.raises(InvalidDateError):
            resolver.resolve({"eventDate": "2026-01-01"}, "2026-02-30")

    def test_negative_reminder_rejected(self) -> None:
        """Negative offsets are a caller data error."""
        with pytest.raises(PreconditionViolation) as exc_info:
            RecurringEvent(date(2026, 1, 1), reminder_days=-1)

        assert exc_info.value.field == "reminderDays"
        assert exc_info.value.value == -1

    def test_monthly_day_out_of_range_rejected(self) -> None:
        """Monthly reminder days must be 1-31."""
        with pytest.raises(PreconditionViolation):
            RecurringEvent.from_record(
                {"eventDate": "2026-01-01", "monthlyReminder": True, "monthlyReminderDay": 0}
            )


class TestOccurrenceSerialization:
    """Tests for OccurrenceResult.to_dict."""

    def test_to_dict(self, resolver: RecurrenceResolver, today: date) -> None:
        """Output uses the frontend's field names and ISO dates."""
        result = resolver.resolve(
            {
                "id": "evt-1",
                "title": "Christmas",
                "eventDate": "2019-12-25",
                "isRecurring": True,
                "reminderDays": 7,
            },
            today,
        )

        assert result.to_dict() == {
            "id": "evt-1",
            "title": "Christmas",
            "eventDate": "2026-12-25",
            "reminderDate": "2026-12-18",
            "daysUntilReminder": 61,
            "daysUntilEvent": 68,
            "isRecurring": True,
        }

    def test_to_dict_omits_missing_identity(self) -> None:
        """id and title are left out when the event had none."""
        result = OccurrenceResult(
            next_occurrence=date(2026, 1, 1),
            reminder_date=date(2026, 1, 1),
            days_until_occurrence=0,
            days_until_reminder=0,
            is_recurring=False,
        )

        assert "id" not in result.to_dict()
        assert "title" not in result.to_dict()


# =============================================================================
# Collections
# =============================================================================


class TestUpcomingReminders:
    """Tests for upcoming_reminders."""

    def test_filters_and_sorts(self, resolver: RecurrenceResolver, today: date) -> None:
        """Elapsed reminders are dropped, the rest ordered soonest first."""
        events = [
            {"title": "A", "eventDate": "2019-12-25", "isRecurring": True, "reminderDays": 7},
            {"title": "B", "eventDate": "2026-10-20", "reminderDays": 7},
            {"title": "C", "eventDate": "2019-10-25", "isRecurring": True},
            {"title": "D", "eventDate": "2026-11-01", "reminderDays": 14},
        ]

        reminders = resolver.upcoming_reminders(events, today)

        assert [r.title for r in reminders] == ["D", "C", "A"]
        assert [r.days_until_reminder for r in reminders] == [0, 7, 61]

    def test_empty(self, resolver: RecurrenceResolver, today: date) -> None:
        """No events, no reminders."""
        assert resolver.upcoming_reminders([], today) == []

    def test_does_not_mutate_input(
        self, resolver: RecurrenceResolver, today: date
    ) -> None:
        """The caller's list is left as it was."""
        events = [
            RecurringEvent(date(2019, 12, 25), is_recurring=True),
            RecurringEvent(date(2019, 10, 25), is_recurring=True),
        ]
        snapshot = list(events)

        resolver.upcoming_reminders(events, today)

        assert events == snapshot


class TestSummarizeEvents:
    """Tests for summarize_events."""

    def test_counts(self, resolver: RecurrenceResolver, today: date) -> None:
        """Totals, upcoming and per-type counts in first-seen order."""
        events = [
            {"eventDate": "2019-12-25", "isRecurring": True, "type": "holiday"},
            {"eventDate": "2026-10-20", "type": "birthday"},
            {"eventDate": "2025-01-01", "type": "holiday"},
            {"eventDate": "2026-10-18"},
        ]

        summary = resolver.summarize_events(events, today)

        assert summary.total_events == 4
        assert summary.upcoming_events == 3
        assert list(summary.events_by_type.items()) == [
            ("holiday", 2),
            ("birthday", 1),
            ("other", 1),
        ]
        assert summary.to_dict() == {
            "totalEvents": 4,
            "upcomingEvents": 3,
            "eventsByType": {"holiday": 2, "birthday": 1, "other": 1},
        }

    def test_empty(self, resolver: RecurrenceResolver, today: date) -> None:
        """An empty collection summarizes to zeros."""
        summary = resolver.summarize_events([], today)

        assert summary.total_events == 0
        assert summary.upcoming_events == 0
        assert summary.events_by_type == {}


class TestMonthlyReminders:
    """Tests for monthly_reminders."""

    def test_monthly_reminder_dates(self, resolver: RecurrenceResolver) -> None:
        """Reminders fall in today's month, clamped to its length."""
        events = [
            {"id": "e", "eventDate": "2020-01-31", "monthlyReminder": True},
            {
                "id": "f",
                "eventDate": "2020-05-03",
                "monthlyReminder": True,
                "monthlyReminderDay": 15,
            },
            {"id": "g", "eventDate": "2020-05-03"},
        ]

        reminders = resolver.monthly_reminders(events, date(2026, 2, 10))

        assert [r.event_id for r in reminders] == ["e", "f"]
        assert reminders[0].reminder_date == date(2026, 2, 28)
        assert reminders[0].original_date == date(2020, 1, 31)
        assert reminders[1].reminder_date == date(2026, 2, 15)
        assert reminders[1].to_dict() == {
            "id": "f",
            "originalDate": "2020-05-03",
            "reminderDate": "2026-02-15",
        }


class TestUpcomingWithin:
    """Tests for upcoming_within."""

    @pytest.fixture
    def events(self) -> list[dict]:
        """Return events around the default 30-day window."""
        return [
            {"title": "A", "eventDate": "2019-12-25", "isRecurring": True},
            {"title": "B", "eventDate": "2026-10-20"},
            {"title": "C", "eventDate": "2019-10-25", "isRecurring": True},
            {"title": "D", "eventDate": "2026-10-01"},
            {"title": "E", "eventDate": "2020-11-17", "isRecurring": True},
            {"title": "F", "eventDate": "2020-11-18", "isRecurring": True},
        ]

    def test_default_window(
        self, resolver: RecurrenceResolver, today: date, events: list[dict]
    ) -> None:
        """Occurrences up to 30 days out are kept, soonest first."""
        results = resolver.upcoming_within(events, today)

        assert [r.title for r in results] == ["B", "C", "E"]
        assert [r.days_until_occurrence for r in results] == [2, 7, 30]

    def test_wider_window(
        self, resolver: RecurrenceResolver, today: date, events: list[dict]
    ) -> None:
        """A longer window reaches further; past one-off events stay out."""
        results = resolver.upcoming_within(events, today, days=90)

        assert [r.title for r in results] == ["B", "C", "E", "F", "A"]

    def test_zero_window_is_today_only(
        self, resolver: RecurrenceResolver, today: date
    ) -> None:
        """days=0 keeps only occurrences falling today."""
        events = [
            {"title": "today", "eventDate": "2019-10-18", "isRecurring": True},
            {"title": "tomorrow", "eventDate": "2026-10-19"},
        ]

        results = resolver.upcoming_within(events, today, days=0)

        assert [r.title for r in results] == ["today"]

    def test_negative_window_rejected(
        self, resolver: RecurrenceResolver, today: date
    ) -> None:
        """A negative window is a caller error."""
        with pytest.raises(PreconditionViolation):
            resolver.upcoming_within([], today, days=-1)
