# File: utils/dt_utils.py
"""Civil-date utilities for cyclecal.

A civil date is a plain (year, month, day) with no time of day and no
timezone, represented by ``datetime.date``. Every calculation in the
engines happens on civil dates; instants (``datetime`` values or ISO
strings with a time part) are reduced to their calendar date once, at the
boundary, by ``to_civil_date``.

Uses standard library: datetime, calendar, zoneinfo, plus dateutil for
month/year arithmetic with day clamping.

Functions:
    - set_default_timezone / get_default_timezone: Timezone for dt_today_local
    - dt_today_local: Today's civil date in a timezone (for callers only)
    - to_civil_date: Normalize a date, datetime or string to a civil date
    - to_optional_civil_date: Same, but None/empty stays None
    - days_between: Signed calendar-day difference
    - is_leap_year: Gregorian leap year test
    - anniversary_in_year: Same month/day in another year, Feb 29 clamped
    - day_in_month: Given day of a month, clamped to the month's length
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
import logging
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

# Third-party date utilities
from dateutil.relativedelta import relativedelta

from ..exceptions import InvalidDateError

if TYPE_CHECKING:
    from datetime import tzinfo

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# Default timezone for dt_today_local - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Non-ISO formats accepted by to_civil_date, tried in order
FALLBACK_DATE_FORMATS = ("%m/%d/%Y", "%Y/%m/%d")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the timezone dt_today_local uses when none is passed.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Return the timezone dt_today_local uses when none is passed."""
    return DEFAULT_TIME_ZONE


def dt_today_local(tz: tzinfo | None = None) -> date:
    """Return today's civil date in a timezone.

    The engines never call this; it exists for the request layer that has to
    decide what "today" is for a user before calling them.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Today's date in the specified timezone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


# ==============================================================================
# Parsing / Normalization
# ==============================================================================


def to_civil_date(value: Any, tz: tzinfo | None = None) -> date:
    """Normalize a date-like input to a civil date.

    Accepts:
    - ``date``: returned unchanged
    - ``datetime``: its calendar date; the time of day is dropped
    - ISO strings: "2025-04-07", "2025-04-07T14:30:00", "2024-02-29T00:00:00.000Z"
    - US/slashed strings: "04/07/2025", "2025/04/07"

    The date is read as written. An aware datetime (or an ISO string with an
    offset) is only shifted into another zone when ``tz`` is given, so a
    stored "2024-02-29T00:00:00.000Z" is Feb 29 whatever the server zone is.

    Args:
        value: Input to normalize
        tz: Optional zone to convert aware instants into before dropping the
            time. Naive values are never converted.

    Returns:
        The civil date.

    Raises:
        InvalidDateError: If the value is empty, of an unsupported type, not
            parseable, or names an impossible calendar date.

    Examples:
        to_civil_date("2024-02-29T23:30:00-05:00") → date(2024, 2, 29)
        to_civil_date("2024-02-29T23:30:00-05:00", ZoneInfo("UTC")) → date(2024, 3, 1)
        to_civil_date("2025-13-01") → InvalidDateError
    """
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        raise InvalidDateError(value, f"unsupported type {type(value).__name__}")

    text = value.strip()
    if not text:
        raise InvalidDateError(value, "empty string")

    # Plain ISO date first (most common)
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    # ISO datetime, including a trailing "Z" and fractional seconds
    try:
        return to_civil_date(datetime.fromisoformat(text), tz)
    except ValueError:
        pass

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    _LOGGER.debug("Rejecting unparseable date input: %r", value)
    raise InvalidDateError(value, "not a valid calendar date")


def to_optional_civil_date(value: Any, tz: tzinfo | None = None) -> date | None:
    """Normalize an optional date-like input; None or "" stays None.

    Raises:
        InvalidDateError: If a non-empty value cannot be normalized.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_civil_date(value, tz)


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def days_between(start: date, end: date) -> int:
    """Return the signed number of calendar days from ``start`` to ``end``.

    Examples:
        days_between(date(2025, 12, 31), date(2026, 1, 1)) → 1
        days_between(date(2026, 1, 1), date(2025, 12, 31)) → -1
    """
    return (end - start).days


def is_leap_year(year: int) -> bool:
    """Return True for Gregorian leap years."""
    return calendar.isleap(year)


def anniversary_in_year(original: date, year: int) -> date:
    """Return the same month and day as ``original`` in ``year``.

    February 29 falls back to February 28 in non-leap years. The result is
    always derived from ``original``, so a Feb 29 anniversary comes back to
    Feb 29 in the next leap year instead of sticking to the 28th.

    Examples:
        anniversary_in_year(date(2024, 2, 29), 2025) → date(2025, 2, 28)
        anniversary_in_year(date(2024, 2, 29), 2028) → date(2028, 2, 29)
    """
    return original + relativedelta(year=year)


def day_in_month(year: int, month: int, day: int) -> date:
    """Return ``day`` of the given month, clamped to the month's last day.

    Examples:
        day_in_month(2026, 2, 31) → date(2026, 2, 28)
        day_in_month(2026, 4, 15) → date(2026, 4, 15)
    """
    return date(year, month, 1) + relativedelta(day=day)
